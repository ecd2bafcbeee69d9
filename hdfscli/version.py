"""Version information for hdfs-shell"""

__version__ = "1.0.0"


def get_version_string():
    """Get formatted version string"""
    return f"hdfs-shell {__version__}"
