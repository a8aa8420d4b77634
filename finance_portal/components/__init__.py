"""
Component registry for the portal
This module manages all feature components and their registration.
"""


class ComponentRegistry:
    """Registry for portal components"""

    def __init__(self):
        self.components = {}

    def register_component(self, name, component_class):
        """Register a portal component"""
        self.components[name] = component_class

    def get_component(self, name):
        """Get a registered component"""
        return self.components.get(name)

    def describe(self):
        """Title, description and entry path of every component with a landing page"""
        return [
            {
                'name': name,
                'title': getattr(component_class, 'title', name),
                'description': getattr(component_class, 'description', ''),
                'path': getattr(component_class, 'path', None),
            }
            for name, component_class in sorted(self.components.items())
            if getattr(component_class, 'path', None)
        ]


# Global registry instance
registry = ComponentRegistry()


def register_component(name):
    """Decorator for registering components"""
    def decorator(component_class):
        registry.register_component(name, component_class)
        return component_class
    return decorator


__all__ = ['ComponentRegistry', 'registry', 'register_component']
