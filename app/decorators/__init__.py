from app.decorators.envelope import envelope_errors

__all__ = ["envelope_errors"]
