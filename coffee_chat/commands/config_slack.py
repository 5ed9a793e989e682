"""Slack configuration command with guided setup flow."""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from .utils import get_env_file_path, mask_secret, prompt_with_validation, update_env_values
from .validators import validate_slack_bot_token, validate_slack_channel_id, validate_slack_user_ids

AUTH_TEST_URL = "https://slack.com/api/auth.test"

BOT_SCOPES = (
    "channels:history",
    "groups:history",
    "im:history",
    "im:write",
    "chat:write",
)


def validate_slack_bot_token_api(token: str) -> tuple[bool, str, Optional[Dict[str, Any]]]:
    """
    Validate Slack bot token by calling auth.test API.

    Returns:
        (is_valid, error_message, response_data)
    """
    try:
        response = requests.post(
            AUTH_TEST_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=10,
        )
        data = response.json()
    except (requests.RequestException, ValueError) as exc:
        return False, f"API request failed: {exc}", None

    if data.get("ok"):
        return True, "", data
    return False, data.get("error", "Unknown error"), None


def run_config_slack_command(args) -> int:
    """Guide user through Slack bot setup."""

    print("\n" + "=" * 60)
    print("Slack Configuration")
    print("=" * 60)

    env_file = get_env_file_path(getattr(args, "config_dir", None))
    if env_file.exists():
        print(f"\nExisting configuration found at: {env_file.parent}")
        print("This will update your Slack credentials.\n")
    else:
        print(f"\nConfiguration will be saved to: {env_file.parent}\n")

    print("-" * 60)
    print("Step 1: Bot Token")
    print("-" * 60)
    print("\nCreate a Slack app at https://api.slack.com/apps and add these bot scopes:")
    for scope in BOT_SCOPES:
        print(f"  • {scope}")
    print("Install it to your workspace and copy the 'Bot User OAuth Token' (xoxb-...).")

    bot_token = prompt_with_validation(
        "\nPaste your Bot User OAuth Token (xoxb-...)",
        validate_slack_bot_token,
        required=True,
    )

    print("\n→ Validating bot token...")
    is_valid, error, auth_data = validate_slack_bot_token_api(bot_token)
    bot_user_id = ""
    if is_valid and auth_data:
        print("✓ Bot token valid!")
        print(f"  Team: {auth_data.get('team', 'Unknown')}")
        print(f"  Bot: {auth_data.get('user', 'Unknown')}")
        bot_user_id = auth_data.get("user_id", "")
    else:
        print(f"⚠ Warning: Could not validate token - {error}")
        print("  The token may still work. Continuing...")

    print("\n" + "-" * 60)
    print("Step 2: Channel")
    print("-" * 60)
    print("\nCoffee Chat reads messages from one conversation (a channel or your DM with the bot).")
    print("Open it in Slack, click the name at the top and copy the ID at the bottom of the About tab.")

    channel_id = prompt_with_validation(
        "\nEnter the channel ID (e.g., C01ABC234 or D01ABC234)",
        validate_slack_channel_id,
        required=True,
    )

    print("\n" + "-" * 60)
    print("Step 3: Owner")
    print("-" * 60)
    print("\nOnly messages from owners are handled, and reminders go to the first owner.")
    print("To find your Slack User ID: Profile → '...' menu → 'Copy member ID'.")
    if bot_user_id:
        print(f"\n(Note: The bot's user ID is {bot_user_id} - don't add this one)")

    owner_ids = prompt_with_validation(
        "\nEnter owner Slack user IDs (comma-separated, e.g., U01ABC123)",
        validate_slack_user_ids,
        required=True,
    )

    print("\n" + "=" * 60)
    print("Configuration Summary")
    print("=" * 60)
    print(f"\nSlack Bot Token: {mask_secret(bot_token)}")
    print(f"Channel: {channel_id}")
    print(f"Owners: {owner_ids}")

    try:
        confirm = input("\nSave this configuration? (Y/n): ").strip().lower()
    except (EOFError, KeyboardInterrupt):
        print("\nSetup cancelled.")
        return 0

    if confirm == "n":
        print("Configuration cancelled.")
        return 0

    update_env_values(
        env_file,
        "Slack Configuration",
        {
            "SLACK_BOT_TOKEN": bot_token,
            "SLACK_CHANNEL_ID": channel_id,
            "SLACK_OWNER_USER_IDS": owner_ids,
        },
    )
    print(f"\n✓ Slack configuration saved to {env_file}")

    print("\nNext steps:")
    print("  1. Invite your bot to the channel it should read")
    print("  2. Optionally run 'coffee-chat config calendar' for availability in drafts")
    print("  3. Run 'coffee-chat' to start the assistant")
    return 0
