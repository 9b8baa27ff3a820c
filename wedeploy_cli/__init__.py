"""WeDeploy CLI - deploy and run services on WeDeploy from your terminal"""

__version__ = "1.0.0"
