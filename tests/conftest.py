"""
Pytest Configuration and Fixtures

Shared fixtures for KeyScan tests.
"""

import tempfile
from pathlib import Path
from typing import Generator

import pytest

from keyscan.core.config import ScanConfig
from keyscan.core.finding import Finding

OPENAI_KEY = "sk-ABCDEFGHIJKLMNOPQRSTUVWXYZ012345"
ANTHROPIC_KEY = "sk-ant-REDACTED"
GOOGLE_KEY = "AIza" + "SyD4-example_Key0123456789abcdefghi"


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config() -> ScanConfig:
    """Create a default configuration."""
    return ScanConfig()


@pytest.fixture
def single_key_diff() -> str:
    """A diff adding one line that holds an OpenAI key."""
    return (
        "--- a/src/app.js\n"
        "+++ b/src/app.js\n"
        "@@ -0,0 +1,1 @@\n"
        f'+const key = "{OPENAI_KEY}";\n'
    )


@pytest.fixture
def multi_file_diff() -> str:
    """A diff touching three files, one of them without added lines."""
    return (
        "--- a/config/settings.py\n"
        "+++ b/config/settings.py\n"
        "@@ -10,4 +10,5 @@ import os\n"
        " DEBUG = False\n"
        "-API_KEY = os.environ['API_KEY']\n"
        f'+API_KEY = "{OPENAI_KEY}"\n'
        f'+GEMINI_KEY = "{GOOGLE_KEY}"\n'
        " \n"
        " TIMEOUT = 30\n"
        "@@ -40,2 +41,3 @@ def load():\n"
        "     return settings\n"
        f'+ANTHROPIC = "{ANTHROPIC_KEY}"\n'
        " \n"
        "--- a/README.md\n"
        "+++ b/README.md\n"
        "@@ -1,3 +1,2 @@\n"
        " # Project\n"
        "-Old line\n"
        " More text\n"
        "--- a/test/fixtures/key.txt\n"
        "+++ b/test/fixtures/key.txt\n"
        "@@ -0,0 +1,2 @@\n"
        "+fixture\n"
        f"+{OPENAI_KEY}\n"
    )


@pytest.fixture
def sample_findings() -> list:
    """Create a list of sample findings."""
    return [
        Finding(
            file="config/settings.py",
            line=11,
            key_type="OpenAI API Key",
            match="sk-ABCDEFGHIJKLMNOPQ...",
            rule_id="openai",
        ),
        Finding(
            file="config/settings.py",
            line=12,
            key_type="Google AI API Key",
            match="AIzaSyD4-example_Key...",
            rule_id="google",
        ),
        Finding(
            file="src/client.ts",
            line=3,
            key_type="Anthropic API Key",
            match="sk-ant-api03-abcdefg...",
            rule_id="anthropic",
        ),
    ]


@pytest.fixture
def config_file(temp_dir: Path) -> Path:
    """Create a test config file."""
    path = temp_dir / "ai-key-scanner.yml"
    path.write_text('''
ignorePaths:
  - test/
  - docs/
allowlistRegex:
  - "^sk-ABCDE.*"
''')
    return path
