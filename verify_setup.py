"""
Setup verification script for the DocSense backend.
Checks dependencies, configuration, the database and the Ollama server.
"""
import asyncio
import importlib
import os
import sys
from typing import Awaitable, Callable, List, Tuple

# Color codes for terminal output
GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
RESET = "\033[0m"

# import name -> distribution name
REQUIRED_PACKAGES = {
    "fastapi": "fastapi",
    "uvicorn": "uvicorn",
    "sqlalchemy": "sqlalchemy",
    "asyncpg": "asyncpg",
    "httpx": "httpx",
    "pydantic_settings": "pydantic-settings",
    "aiofiles": "aiofiles",
    "multipart": "python-multipart",
    "fitz": "PyMuPDF",
    "alembic": "alembic",
}


def print_status(message: str, status: bool):
    """Print colored status message."""
    symbol = f"{GREEN}✓{RESET}" if status else f"{RED}✗{RESET}"
    print(f"{symbol} {message}")


async def check_python_version() -> bool:
    """Check Python version is 3.11+."""
    version = sys.version_info
    ok = version >= (3, 11)
    suffix = "" if ok else " (requires 3.11+)"
    print_status(f"Python version: {version.major}.{version.minor}.{version.micro}{suffix}", ok)
    return ok


async def check_dependencies() -> bool:
    """Check if required packages are importable."""
    all_installed = True
    for module, distribution in REQUIRED_PACKAGES.items():
        try:
            importlib.import_module(module)
            print_status(f"Package '{distribution}' installed", True)
        except ImportError:
            print_status(f"Package '{distribution}' missing (pip install {distribution})", False)
            all_installed = False
    return all_installed


async def check_env_file() -> bool:
    """Check if .env file exists."""
    exists = os.path.exists(".env")
    print_status(".env file exists" if exists else ".env file missing (copy from .env.example)", exists)
    return exists


async def check_upload_dir() -> bool:
    """Check if upload directory exists."""
    from app.config import settings

    exists = os.path.isdir(settings.UPLOAD_DIR)
    if exists:
        print_status(f"Upload directory exists: {settings.UPLOAD_DIR}", True)
    else:
        print_status("Upload directory missing (will be created on startup)", False)
    return exists


async def check_database() -> bool:
    """Connect with the configured DATABASE_URL and run SELECT 1."""
    from sqlalchemy import text

    from app.database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        print_status(f"Database reachable ({engine.url.render_as_string(hide_password=True)})", True)
        return True
    except Exception as e:
        print_status(f"Database connection failed: {e}", False)
        print(f"  {YELLOW}Check DATABASE_URL in .env{RESET}")
        return False
    finally:
        await engine.dispose()


async def check_ollama() -> bool:
    """Check if Ollama is running and has the configured model."""
    import httpx

    from app.config import settings

    if not settings.LLM_ENABLED:
        print(f"  {YELLOW}LLM_ENABLED=false; analysis will use local algorithms only{RESET}")
        return True

    try:
        async with httpx.AsyncClient(timeout=5.0) as client:
            response = await client.get(f"{settings.OLLAMA_BASE_URL}/api/tags")
    except Exception as e:
        print_status(f"Ollama connection failed: {e}", False)
        print(f"  {YELLOW}Make sure Ollama is installed and running (ollama serve){RESET}")
        return False

    if response.status_code != 200:
        print_status(f"Ollama service error (status {response.status_code})", False)
        return False

    print_status("Ollama service is running", True)
    model = settings.OLLAMA_LLM_MODEL
    names = [m.get("name", "") for m in response.json().get("models", [])]
    has_llm = any(name == model or name.startswith(model.split(":")[0]) for name in names)
    print_status(f"LLM model ({model}): {'Found' if has_llm else 'Missing'}", has_llm)
    if not has_llm:
        print(f"  {YELLOW}Run: ollama pull {model}{RESET}")
    return has_llm


async def main():
    """Run all verification checks."""
    print(f"\n{BLUE}{'='*60}{RESET}")
    print(f"{BLUE}DocSense Backend - Setup Verification{RESET}")
    print(f"{BLUE}{'='*60}{RESET}\n")

    checks: List[Tuple[str, Callable[[], Awaitable[bool]]]] = [
        ("Python Version", check_python_version),
        ("Dependencies", check_dependencies),
        ("Environment File", check_env_file),
        ("Upload Directory", check_upload_dir),
        ("Database", check_database),
        ("Ollama + Model", check_ollama),
    ]

    results = []

    for check_name, check_func in checks:
        print(f"\n{BLUE}Checking {check_name}...{RESET}")
        try:
            results.append(await check_func())
        except Exception as e:
            print_status(f"Error during check: {e}", False)
            results.append(False)

    # Summary
    print(f"\n{BLUE}{'='*60}{RESET}")
    passed = sum(results)
    total = len(results)

    if passed == total:
        print(f"{GREEN}✓ All checks passed! ({passed}/{total}){RESET}")
        print(f"\n{GREEN}You're ready to run the backend:{RESET}")
        print("  uvicorn app.main:app --reload")
    else:
        print(f"{RED}✗ Some checks failed ({passed}/{total} passed){RESET}")
        print(f"\n{YELLOW}Please fix the issues above before running the backend.{RESET}")
        sys.exit(1)

    print(f"{BLUE}{'='*60}{RESET}\n")


if __name__ == "__main__":
    asyncio.run(main())
