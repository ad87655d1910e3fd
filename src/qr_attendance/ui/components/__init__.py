from .sidebar import NavigationItem, Sidebar

__all__ = ["NavigationItem", "Sidebar"]
