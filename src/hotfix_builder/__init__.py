"""
Hotfix Builder - assemble hotfix branches from merged GitHub pull requests.

Matches the commits of merged pull requests to their rewritten counterparts on
the main branch by content fingerprint, orders them by merge date and replays
them onto a release branch with git cherry-pick.
"""

__version__ = "1.0.0"
