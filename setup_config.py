#!/usr/bin/env python3
"""Interactive setup helper for Event Calendar configuration."""

import json
import sys
from pathlib import Path


def main():
    print("\n" + "=" * 70)
    print("📅 Event Calendar - Configuration Setup")
    print("=" * 70 + "\n")

    env_file = Path(".env")

    if env_file.exists():
        response = input("⚠️  .env file already exists. Overwrite? (y/N): ")
        if response.lower() != 'y':
            print("Setup cancelled.")
            return

    print("Let's configure your Firebase project.\n")
    print("You'll need a Firebase web app with Anonymous sign-in enabled:")
    print("https://console.firebase.google.com/ -> Project settings -> Your apps")
    print()

    # Firebase Configuration
    print("─" * 70)
    print("Firebase Configuration")
    print("─" * 70)

    api_key = input("\nWeb API key (apiKey): ").strip()
    project_id = input("Project ID (projectId): ").strip()
    auth_domain = input("Auth domain (authDomain, optional): ").strip()

    firebase_config = {"apiKey": api_key, "projectId": project_id}
    if auth_domain:
        firebase_config["authDomain"] = auth_domain

    # App Configuration
    print("\n" + "─" * 70)
    print("App Configuration")
    print("─" * 70)

    app_id = input("\nApp namespace (APP_ID, default: default-app-id): ").strip() or "default-app-id"
    initial_token = input("Pre-issued custom token (optional, press Enter to skip): ").strip()

    # Generate .env file
    env_content = f"""# Firebase Configuration
FIREBASE_CONFIG={json.dumps(firebase_config)}
APP_ID={app_id}
INITIAL_AUTH_TOKEN={initial_token}

# Session Cache Configuration
SESSION_CACHE_PATH=.session_cache
SESSION_CACHE_ENCRYPTED=true

# Live Subscription
POLL_INTERVAL_SECONDS=2

# Logging Configuration
LOG_LEVEL=INFO
LOG_FILE=event_calendar.log
"""

    with open(".env", "w") as f:
        f.write(env_content)

    print("\n" + "=" * 70)
    print("✅ Configuration saved to .env")
    print("=" * 70)

    print("\n📋 Next steps:")
    print("1. Enable Authentication -> Sign-in method -> Anonymous")
    print("2. Create a Cloud Firestore database with rules allowing each user")
    print("   to read/write artifacts/{appId}/users/{userId}/events when")
    print("   request.auth.uid == userId")
    print("3. Run: uv run event-calendar")
    print()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nSetup cancelled.")
        sys.exit(0)
