"""owon-dge version information."""

__version__ = "0.2.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.1.0 - Initial release: find DGE2070, configure both channels, run 4 s, off
# 0.2.0 - Typed results/errors, DGE2035 reported as its own model, session
#         released on every exit path, config file + env overrides, CLI
#         subcommands (detect, identify, run, output)
