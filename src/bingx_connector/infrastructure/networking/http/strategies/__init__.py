from .exception_handler import ExceptionHandlerStrategy, ErrorKind, ClassifiedError

__all__ = ['ExceptionHandlerStrategy', 'ErrorKind', 'ClassifiedError']
