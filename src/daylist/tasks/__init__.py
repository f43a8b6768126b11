"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Subtask, TaskNote, TaskStatus, schedule variant)
- task_sync.py: in-memory task list kept in sync with the row store
- task_board.py: notification adapter used by front ends
- task_api.py: grouping / formatting / input helpers used by the rest of the app
"""
