"""
Tests for the API Key Scanner
"""

import pytest

from conftest import ANTHROPIC_KEY, GOOGLE_KEY, OPENAI_KEY
from keyscan.core.config import ScanConfig
from keyscan.core.diff import ReconstructedFile, parse_diff
from keyscan.core.finding import redact
from keyscan.scanners.keys import KEY_PATTERNS, KeyScanner, scan_diff


def _file(content: str, path: str = "app.py", line_map=None) -> ReconstructedFile:
    if line_map is None:
        line_map = {i: i + 1 for i in range(content.count("\n"))}
    return ReconstructedFile(path=path, content=content, line_map=line_map)


class TestKeyPatterns:
    """Tests for the recognition rules."""

    def _matches(self, key: str, text: str) -> list:
        rule = next(r for r in KEY_PATTERNS if r.key == key)
        return [m.group(0) for m in rule.pattern.finditer(text)]

    def test_rule_order(self):
        """Test rules are applied in declaration order."""
        assert [r.key for r in KEY_PATTERNS] == ["openai", "anthropic", "google"]

    @pytest.mark.parametrize("text", [
        "sk-" + "a" * 20,
        "sk-proj-" + "A1_-" * 10,
        'OPENAI_API_KEY="sk-' + "Z" * 48 + '"',
    ])
    def test_openai_detects(self, text: str):
        """Test OpenAI key shapes."""
        assert len(self._matches("openai", text)) == 1

    @pytest.mark.parametrize("text", [
        "sk-" + "a" * 19,
        "task-" + "a" * 30,
        "sk-" + "a" * 10 + " " + "a" * 10,
    ])
    def test_openai_rejects(self, text: str):
        """Test too short, embedded and split strings."""
        assert self._matches("openai", text) == []

    def test_anthropic_detects(self):
        """Test Anthropic key shape."""
        assert self._matches("anthropic", f"key: {ANTHROPIC_KEY}") == [ANTHROPIC_KEY]

    def test_anthropic_rejects_short(self):
        """Test Anthropic key body shorter than 20 characters."""
        assert self._matches("anthropic", "sk-ant-" + "a" * 19) == []

    def test_google_exact_length(self):
        """Test Google key needs exactly 35 characters after the prefix."""
        assert self._matches("google", GOOGLE_KEY) == [GOOGLE_KEY]
        assert self._matches("google", "AIza" + "b" * 34) == []
        assert self._matches("google", "AIza" + "b" * 36) == []

    def test_google_word_boundary_prefix(self):
        """Test Google key embedded in a longer token."""
        assert self._matches("google", "xAIza" + "b" * 35) == []

    def test_multiple_matches_on_one_line(self):
        """Test every non-overlapping match on a line is found."""
        text = f"a={OPENAI_KEY} b=sk-{'q' * 22}"
        assert len(self._matches("openai", text)) == 2


class TestKeyScanner:
    """Tests for KeyScanner."""

    def test_single_key_scenario(self, single_key_diff: str):
        """Test one OpenAI key on line 1 with a redacted fragment."""
        result = scan_diff(single_key_diff)

        assert len(result.findings) == 1
        finding = result.findings[0]
        assert finding.file == "src/app.js"
        assert finding.line == 1
        assert finding.key_type == "OpenAI API Key"
        assert finding.rule_id == "openai"
        assert finding.match == "sk-ABCDEFGHIJKLMNOPQ..."
        assert result.passed is False

    def test_allowlist_suppresses(self, single_key_diff: str):
        """Test a match satisfying the allowlist is dropped."""
        config = ScanConfig(allowlist_regex=["^sk-ABCDE.*"])
        result = scan_diff(single_key_diff, config)

        assert result.findings == []
        assert result.passed

    def test_allowlist_is_unanchored_search(self, single_key_diff: str):
        """Test allowlist entries match anywhere in the key."""
        config = ScanConfig(allowlist_regex=["XYZ"])
        assert scan_diff(single_key_diff, config).findings == []

    def test_ignore_path_substring(self, multi_file_diff: str):
        """Test files containing an ignore substring produce no findings."""
        config = ScanConfig(ignore_paths=["test/"])
        result = scan_diff(multi_file_diff, config)

        assert all(f.file == "config/settings.py" for f in result.findings)
        assert result.files_ignored == 1
        assert result.files_scanned == 1

    def test_ignore_path_is_not_glob(self, multi_file_diff: str):
        """Test glob syntax is matched literally."""
        config = ScanConfig(ignore_paths=["test/*"])
        result = scan_diff(multi_file_diff, config)

        assert any(f.file == "test/fixtures/key.txt" for f in result.findings)
        assert result.files_ignored == 0

    def test_findings_order_and_lines(self, multi_file_diff: str):
        """Test file, then line, then rule order."""
        result = scan_diff(multi_file_diff)

        assert [(f.file, f.line, f.rule_id) for f in result.findings] == [
            ("config/settings.py", 11, "openai"),
            ("config/settings.py", 12, "google"),
            ("config/settings.py", 42, "openai"),
            ("config/settings.py", 42, "anthropic"),
            ("test/fixtures/key.txt", 2, "openai"),
        ]

    def test_two_categories_checked_independently(self):
        """Test an allowlist entry can drop one category's finding only."""
        line = f'x = "{ANTHROPIC_KEY}"  # {GOOGLE_KEY}\n'
        files = {"k.py": _file(line, "k.py")}

        both = KeyScanner(files).scan()
        assert [f.rule_id for f in both.findings] == ["openai", "anthropic", "google"]

        config = ScanConfig(allowlist_regex=["^AIza"])
        filtered = KeyScanner(files, config).scan()
        assert [f.rule_id for f in filtered.findings] == ["openai", "anthropic"]

    def test_invalid_allowlist_regex_warns(self, single_key_diff: str):
        """Test a malformed allowlist entry warns and never matches."""
        config = ScanConfig(allowlist_regex=["([unclosed", "^nomatch$"])
        result = scan_diff(single_key_diff, config)

        assert len(result.findings) == 1
        assert len(result.warnings) == 1
        assert "([unclosed" in result.warnings[0]

    def test_invalid_allowlist_does_not_disable_others(self, single_key_diff: str):
        """Test valid entries still apply next to a broken one."""
        config = ScanConfig(allowlist_regex=["*bad", "^sk-"])
        result = scan_diff(single_key_diff, config)

        assert result.findings == []
        assert len(result.warnings) == 1

    def test_missing_line_map_entry_falls_back(self):
        """Test unmapped content lines use their position."""
        content = f"nothing\n{OPENAI_KEY}\n"
        files = {"a.txt": _file(content, "a.txt", line_map={0: 30})}

        result = KeyScanner(files).scan()
        assert [f.line for f in result.findings] == [2]

    def test_empty_diff(self):
        """Test empty input is not an error."""
        result = scan_diff("")

        assert result.findings == []
        assert result.warnings == []
        assert result.files_scanned == 0

    def test_only_removed_lines(self):
        """Test a diff removing a key reports nothing."""
        diff = (
            "--- a/.env\n"
            "+++ b/.env\n"
            "@@ -1,2 +1,1 @@\n"
            f"-OPENAI_API_KEY={OPENAI_KEY}\n"
            " DEBUG=1\n"
        )
        assert scan_diff(diff).findings == []

    def test_key_in_context_line_not_reported(self):
        """Test keys already present in unchanged lines are ignored."""
        diff = (
            "--- a/.env\n"
            "+++ b/.env\n"
            "@@ -1,1 +1,2 @@\n"
            f" OPENAI_API_KEY={OPENAI_KEY}\n"
            "+DEBUG=1\n"
        )
        assert scan_diff(diff).findings == []

    def test_removed_dev_null_line_keeps_file(self):
        """Test a removed '-- /dev/null' SQL comment does not hide later keys."""
        diff = (
            "--- a/schema.sql\n"
            "+++ b/schema.sql\n"
            "@@ -1,2 +1,2 @@\n"
            "--- /dev/null is the sink\n"
            f"+-- key {OPENAI_KEY}\n"
            " SELECT 1;\n"
        )
        findings = scan_diff(diff).findings

        assert [(f.file, f.line, f.rule_id) for f in findings] == [("schema.sql", 1, "openai")]

    def test_rescan_is_identical(self, multi_file_diff: str):
        """Test scanning twice yields the same ordered findings."""
        files = parse_diff(multi_file_diff)
        config = ScanConfig(allowlist_regex=["[", "^AIza"])
        scanner = KeyScanner(files, config)

        first = scanner.scan()
        second = scanner.scan()
        assert first.findings == second.findings
        assert first.warnings == second.warnings

    def test_redaction_bound(self):
        """Test findings never carry more than 20 key characters."""
        long_key = "sk-proj-" + "k" * 200
        diff = f"--- a/a\n+++ b/a\n@@ -0,0 +1 @@\n+{long_key}\n"
        finding = scan_diff(diff).findings[0]

        assert finding.match == long_key[:20] + "..."
        assert len(finding.match) == 23
        assert long_key not in repr(finding)

    def test_debug_messages_exclude_key(self, single_key_diff: str):
        """Test debug callback output never contains the key."""
        messages = []
        config = ScanConfig(allowlist_regex=["^sk-"], ignore_paths=["vendor/"])
        diff = single_key_diff + single_key_diff.replace("src/app.js", "vendor/lib.js")
        scan_diff(diff, config, on_debug=messages.append)

        assert messages == [
            "Key in src/app.js:1 matches allowlist, skipping",
            "Ignoring vendor/lib.js (matches ignorePaths)",
        ]
        assert not any(OPENAI_KEY in m for m in messages)


class TestRedact:
    """Tests for redact."""

    def test_short_text_still_marked(self):
        """Test the marker is appended even when nothing is cut."""
        assert redact("abc") == "abc..."
