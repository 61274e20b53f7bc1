"""API routers; each module exposes `router` and is mounted by create_app()."""
