"""deploy-experimental.

Trigger a GitHub Actions workflow for one of your open pull requests on one of
six experimental environments:
- configuration loaded from the environment and `.env`
- structured logging
- interactive pull request and workflow selection
"""

__version__ = "0.1.0"

from deploy_experimental.config import Settings, load_settings

__all__ = ["__version__", "Settings", "load_settings"]
