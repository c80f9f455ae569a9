#!/usr/bin/env python3
"""
Setup Verification Script

Validates configuration and runs a smoke search before starting the API.
Run this after editing your .env file.

Usage:
    python scripts/verify_setup.py
"""

import asyncio
import os
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Load environment variables
from dotenv import load_dotenv
load_dotenv()


def print_header(title: str) -> None:
    """Print section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print(f"{'='*60}")


def print_result(name: str, success: bool, message: str = "") -> None:
    """Print check result."""
    status = "[PASS]" if success else "[FAIL]"
    color = "\033[92m" if success else "\033[91m"
    reset = "\033[0m"
    msg = f" - {message}" if message else ""
    print(f"  {color}{status}{reset} {name}{msg}")


def check_env_file() -> bool:
    """Report whether a .env file is present. Defaults work without one."""
    env_path = project_root / ".env"
    if env_path.exists():
        print_result(".env file", True, "Found")
    else:
        print_result(".env file", True, "Not found, using defaults")
    return True


def check_dependencies() -> bool:
    """Check if required Python packages are installed."""
    required_packages = [
        "fastapi",
        "uvicorn",
        "pydantic",
        "pydantic_settings",
        "httpx",
        "anthropic",
    ]

    missing = []
    for package in required_packages:
        try:
            __import__(package)
        except ImportError:
            missing.append(package)

    if missing:
        print_result("Python packages", False, f"Missing: {', '.join(missing)}")
        return False
    print_result("Python packages", True, "All required packages installed")
    return True


def check_settings() -> bool:
    """Load settings and validate the slot grid."""
    try:
        from app.config import get_settings
        from app.api.routes.health import check_scheduling_config

        settings = get_settings()
    except Exception as e:
        print_result("Settings", False, str(e)[:80])
        return False

    print_result("APP_ENV", True, settings.app_env)
    print_result(
        "Slot grid",
        True,
        f"{settings.first_slot:%H:%M}-{settings.last_slot:%H:%M} "
        f"every {settings.slot_duration_minutes} min, {settings.search_window_days} day window",
    )

    if not check_scheduling_config():
        print_result("Scheduling config", False, "Window, duration or first/last slot invalid")
        return False
    print_result("Scheduling config", True, "Valid")
    return True


def check_smoke_search() -> bool:
    """Run one appointment search end to end."""
    try:
        from app.core.scheduling import find_appointments

        result = find_appointments("next tuesday afternoon with Dr. Johnson", today=date.today())
    except Exception as e:
        print_result("Appointment search", False, str(e)[:80])
        return False

    found = len(result.perfect) + len(result.close)
    print_result("Appointment search", found > 0, f"{found} slots returned")
    return found > 0


async def check_anthropic() -> bool:
    """Verify the Anthropic API key with a minimal call."""
    api_key = os.getenv("ANTHROPIC_API_KEY", "")

    if not api_key or api_key == "your-api-key-here":
        print_result("Anthropic API", True, "Not configured, assistant will use local rules")
        return True

    try:
        from app.infra.claude import ClaudeClient

        client = ClaudeClient(api_key=api_key)
        await client.generate(prompt="Hi", max_tokens=10, use_fallback_on_error=False)
        await client.close()

        print_result("Anthropic API", True, "Key validated successfully")
        return True

    except Exception as e:
        error_msg = str(e)
        if "authentication" in error_msg.lower() or "api_key" in error_msg.lower():
            print_result("Anthropic API", False, "Invalid API key")
        elif "rate" in error_msg.lower():
            print_result("Anthropic API", True, "Key valid (rate limited)")
            return True
        else:
            print_result("Anthropic API", False, error_msg[:50])
        return False


async def main():
    """Run all verification checks."""
    print("\n" + "="*60)
    print(" Clinic Scheduler - Setup Verification")
    print("="*60)

    critical_failed = False
    all_passed = True

    print_header("Environment File")
    check_env_file()

    print_header("Python Dependencies")
    if not check_dependencies():
        critical_failed = True

    print_header("Settings")
    if not critical_failed and not check_settings():
        critical_failed = True

    print_header("Appointment Finder")
    if not critical_failed and not check_smoke_search():
        critical_failed = True

    print_header("Clinical Assistant")
    if not critical_failed and not await check_anthropic():
        # Assistant falls back to rules; not fatal
        all_passed = False

    print_header("Summary")

    if critical_failed:
        print("\n  \033[91mCRITICAL: Some required checks failed.\033[0m")
        print("  Please fix the issues above before running the application.")
        print()
        return 1
    elif not all_passed:
        print("\n  \033[93mWARNING: Some optional checks failed.\033[0m")
        print("  The assistant endpoints will answer from local rules.")
        print()
        return 0
    else:
        print("\n  \033[92mAll checks passed!\033[0m")
        print("  You can start the application with:")
        print("    uvicorn app.main:app --reload")
        print()
        return 0


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
