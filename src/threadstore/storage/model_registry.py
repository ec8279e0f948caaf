"""Model registry to ensure all ORM models are imported before table creation."""

_models_registered = False


def register_all_models() -> None:
    """Import all ORM model modules to register them with Base.metadata.

    Must be called before any metadata operation (create_all, drop_all).
    Idempotent: calls after the first are no-ops.
    """
    global _models_registered

    if _models_registered:
        return

    # Projects must register first; conversations hold a foreign key to them
    from threadstore.projects import orm as _  # noqa: F401
    from threadstore.conversation import orm as _  # noqa: F401,F811

    _models_registered = True
