"""
KeyScan - Pull Request Scanner for Leaked AI API Keys

Scans the lines added by a pull request for hardcoded AI provider keys:
- OpenAI API keys
- Anthropic API keys
- Google AI (Gemini) API keys

Only added lines are inspected, and findings are attributed to the exact
line of the new file version.
"""

__version__ = "1.0.0"


__all__ = [
    "__version__",
]
