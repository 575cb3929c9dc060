from .family_network import FamilyNetwork

__all__ = ["FamilyNetwork"]
