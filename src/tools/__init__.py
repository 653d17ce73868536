from .task_tools import register_task_tools

__all__ = ["register_task_tools"]
