"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskFilter, TaskCompleted) and formatting helpers
- task_store.py: in-memory task collection (create/update/toggle/delete)
- wakeup_scheduler.py: shared deadline-ordered wake-up scheduler
- timer_engine.py: countdown state machine (start/stop/tick/expire)
- persistence.py: snapshot save/load with deadline-based recovery
"""
