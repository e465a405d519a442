"""Search-driver adapters (pymoo, scipy).

Note: submodules import pymoo and scipy; import them directly, e.g.
``from evacopt.adapters.ea import run_ga``.
"""
