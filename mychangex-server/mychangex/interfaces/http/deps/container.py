"""Container dependency, overridable in tests."""

from mychangex.core.container import ApplicationContainer, get_container


def get_app_container() -> ApplicationContainer:
    return get_container()


__all__ = ["get_app_container"]
