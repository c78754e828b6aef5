#!/usr/bin/env python3
"""Helper script to check the .env file and the Gemini credential."""

from pathlib import Path
import os
import sys

TEMPLATE = """# Gemini configuration (required for PDF extraction and route sequencing)
# Get a key from: https://aistudio.google.com/apikey
ROUTEPLANNER_GEMINI_API_KEY=your-api-key-here
# ROUTEPLANNER_EXTRACTION_MODEL=gemini-3-pro-preview
# ROUTEPLANNER_SEQUENCING_MODEL=gemini-3-flash-preview
# ROUTEPLANNER_LLM_TIMEOUT_SECONDS=60

# API Configuration
ROUTEPLANNER_API_PREFIX=/api
# ROUTEPLANNER_FRONTEND_ALLOWED_ORIGINS - Leave commented to use defaults
# JSON array: ["http://localhost:5173"] or comma-separated: http://localhost:5173,http://127.0.0.1:5173

# Defaults applied to extracted clients
ROUTEPLANNER_DEFAULT_CITY=Natal
ROUTEPLANNER_DEFAULT_STATE=RN
ROUTEPLANNER_WHATSAPP_DEFAULT_AREA_CODE=84
"""


def _mask(value: str) -> str:
    if len(value) > 12:
        return value[:6] + "..." + value[-4:]
    return "***"


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Route Planner Environment Checker")
    print("=" * 60)
    print()

    if env_file.exists():
        print(f"✅ Found .env file at: {env_file}")
        print()
    else:
        print(f"❌ .env file NOT found at: {env_file}")
        print("Creating template .env file...")
        with open(env_file, "w", encoding="utf-8") as f:
            f.write(TEMPLATE)
        print(f"✅ Created .env file at: {env_file}")
        print("⚠️  Please edit .env and add your Gemini API key!")
        return

    api_key = os.getenv("ROUTEPLANNER_GEMINI_API_KEY")
    if api_key:
        print(f"✅ ROUTEPLANNER_GEMINI_API_KEY (from environment): {_mask(api_key)}")
    else:
        print("ℹ️  ROUTEPLANNER_GEMINI_API_KEY not set in environment (the .env file may still provide it)")
    print()

    print("Testing config loading and Gemini readiness...")
    print()
    try:
        sys.path.insert(0, str(project_root / "src"))
        from routeplanner.config import settings
        from routeplanner.services.llm.client import check_readiness

        readiness = check_readiness(settings)
    except Exception as e:
        print(f"❌ Error loading config: {e}")
        print("Make sure you're running this from the project root directory")
        return

    if not readiness["configured"]:
        print("=" * 60)
        print("❌ ERROR: Gemini API key is NOT configured")
        print("=" * 60)
        print()
        print("Troubleshooting:")
        print("1. Make sure .env file exists in project root")
        print("2. Make sure variables start with ROUTEPLANNER_ prefix")
        print("3. Restart backend after editing .env")
        return

    if readiness["reachable"]:
        print("=" * 60)
        print(f"✅ SUCCESS: Gemini accepted the key (model {readiness['model']})")
        print("=" * 60)
    else:
        print("=" * 60)
        print(f"❌ ERROR: Gemini did not accept the request: {readiness.get('error', 'unknown error')}")
        print("=" * 60)


if __name__ == "__main__":
    main()
