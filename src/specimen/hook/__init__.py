"""Process-wide exception reporting."""

from specimen.hook.error_hook import ErrorHook

__all__ = ["ErrorHook"]
