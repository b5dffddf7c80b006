"""Directory tree discovery for establishing watch coverage."""

import logging
import os
import stat
from pathlib import Path
from typing import Set, Union

from .exceptions import TraversalError

logger = logging.getLogger(__name__)


def _raise_traversal_error(error: OSError) -> None:
    raise TraversalError(f"Failed to walk {error.filename}: {error}") from error


def discover_directories(root: Union[str, Path], follow_symlinks: bool = False) -> Set[Path]:
    """
    Collect every directory under root, including root itself.
    
    Plain files are never collected; a root that is a plain file yields
    an empty set. Symlinked directories are skipped unless follow_symlinks
    is set.
    
    Args:
        root: Directory to walk
        follow_symlinks: Whether to descend into symlinked directories
        
    Returns:
        Set of directory paths (order is not meaningful)
        
    Raises:
        TraversalError: If root cannot be stat'd or a directory cannot be listed
    """
    root = Path(root)
    
    try:
        info = root.stat() if follow_symlinks else root.lstat()
    except OSError as e:
        raise TraversalError(f"Failed to stat {root}: {e}") from e
    
    if not stat.S_ISDIR(info.st_mode):
        return set()
    
    directories: Set[Path] = set()
    for dirpath, _, _ in os.walk(
        root, onerror=_raise_traversal_error, followlinks=follow_symlinks
    ):
        directories.add(Path(dirpath))
    
    logger.debug(f"Discovered {len(directories)} directories under {root}")
    return directories
