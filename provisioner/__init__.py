"""Server provisioner: menu-driven execution of categorized provisioning units."""

__version__ = "1.2.0"
