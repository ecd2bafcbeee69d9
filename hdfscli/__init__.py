"""hdfs-shell - interactive client for HDFS over WebHDFS"""

from .version import __version__

__all__ = ["__version__"]
