"""
Pipeline stages for squirrelpack.

Each module holds one stage of the packaging pipeline. The stages are
plain functions taking the resolved Options and the staging directory;
squirrelpack.core.create_installer calls them in a fixed order.

Modules:

tools : module
    Locate and provision NuGet.exe and the Squirrel tools.
staging : module
    Create (and later remove) the temporary staging tree.
template : module
    Render the .nuspec descriptor.
content : module
    Write the .nuspec and copy the application plus Update.exe.
packager : module
    Run NuGet.exe pack and locate the .nupkg.
releases : module
    Sync remote releases and run Squirrel --releasify.
mover : module
    Move artifacts to the destination through the rename policy.

Example:
    from squirrelpack.build import create_staging_dir, create_subdirs

    staging_dir = create_subdirs(options, create_staging_dir(options))
"""

from .content import create_application, create_contents, create_spec
from .mover import default_rename, move_package, wait_for_artifact
from .packager import create_package, find_package
from .releases import releasify_package, sync_remote_releases
from .staging import cleanup_staging, create_staging_dir, create_subdirs
from .template import generate_spec
from .tools import ensure_tools, find_tool

__all__ = [
    "cleanup_staging",
    "create_application",
    "create_contents",
    "create_package",
    "create_spec",
    "create_staging_dir",
    "create_subdirs",
    "default_rename",
    "ensure_tools",
    "find_package",
    "find_tool",
    "generate_spec",
    "move_package",
    "releasify_package",
    "sync_remote_releases",
    "wait_for_artifact",
]
