from .parameters import Parameters, default_parameters, resolve_epsilon, DEFAULT_EPSILON_KM

__all__ = ['Parameters', 'default_parameters', 'resolve_epsilon', 'DEFAULT_EPSILON_KM']
