"""Hatch build hook that embeds build metadata in the package.

Usage in the consuming project's pyproject.toml:

    [build-system]
    requires = ["hatchling", "build-provenance"]
    build-backend = "hatchling.build"

    [tool.hatch.build.hooks.provenance]
    path = "src/mypkg/_build_info.py"
    full-hash = false
"""

import os

from hatchling.builders.hooks.plugin.interface import BuildHookInterface
from hatchling.plugin import hookimpl

from build_provenance.metadata import collect_metadata, write_module
from build_provenance.utils import log

# Present at the root of an unpacked sdist.
_SDIST_MARKER = "PKG-INFO"


class ProvenanceBuildHook(BuildHookInterface):
    """Build hook that generates a constants module with version, commit and timestamp."""

    PLUGIN_NAME = "provenance"

    def _relative_path(self) -> str:
        """Return the normalized `path` option, which must stay inside the project root."""
        path = self.config.get("path")
        if not path or not isinstance(path, str):
            raise ValueError(
                f"Option `path` for build hook `{self.PLUGIN_NAME}` must be a non-empty string"
            )
        normalized = os.path.normpath(path)
        if (
            os.path.isabs(path)
            or normalized in (os.curdir, os.pardir)
            or normalized.startswith(os.pardir + os.sep)
        ):
            raise ValueError(
                f"Option `path` for build hook `{self.PLUGIN_NAME}` must be a file "
                f"relative to the project root: {path!r}"
            )
        return normalized

    def initialize(self, version: str, build_data: dict) -> None:
        """Generate the constants module before the build collects files."""
        relative_path = self._relative_path()
        module_path = os.path.join(self.root, relative_path)

        # The sdist already carries the module generated from the git checkout.
        if os.path.isfile(os.path.join(self.root, _SDIST_MARKER)) and os.path.isfile(module_path):
            log(f"Keeping {relative_path} from source distribution", style="dim")
        else:
            metadata = collect_metadata(
                self.root,
                self.metadata.version,
                full_hash=bool(self.config.get("full-hash", False)),
            )
            write_module(metadata, module_path)
            log(
                f"Wrote {relative_path} ({metadata.version}, {metadata.git_short_hash}, "
                f"{metadata.build_timestamp})",
                style="cyan",
            )

        # Generated files are usually VCS-ignored; artifacts are included regardless.
        build_data.setdefault("artifacts", []).append("/" + relative_path.replace(os.sep, "/"))


@hookimpl
def hatch_register_build_hook():
    return ProvenanceBuildHook
