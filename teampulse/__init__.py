"""teampulse - answers "what is this person working on?" from Jira and GitHub."""

__version__ = "0.1.0"
