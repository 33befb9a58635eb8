from hooks import after_all, after_scenario, after_step, before_all, before_scenario  # noqa: F401
