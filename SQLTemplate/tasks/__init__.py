__all__ = ['query', 'update']
