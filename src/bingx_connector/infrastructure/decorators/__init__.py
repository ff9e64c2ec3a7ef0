from .retry import retry_decorator, calculate_delay

__all__ = ['retry_decorator', 'calculate_delay']
