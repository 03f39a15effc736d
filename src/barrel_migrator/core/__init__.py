"""
Core Migration Logic.

Modules:
    - ``declarations``: Export/import declarations of a single module.
    - ``catalog``: Name-to-declaring-module mapping of a package.
    - ``locator``: Consumer modules importing a package.
    - ``planner``: Rewrite plans and their application.
    - ``engine``: The orchestrator.
    - ``report``: Run counters.
"""
