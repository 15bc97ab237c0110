from .state_store import save_state, load_state

__all__ = ["save_state", "load_state"]
