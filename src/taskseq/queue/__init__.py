"""
Task sequencer.

Components:
- queue_models.py: data structures (QueueTask, TaskStatus, QueueStatus, QueueOptions)
- sequencer.py: TaskQueue, the one-at-a-time engine and its pause/retry/reset operations
- errors.py: exceptions raised by TaskQueue operations
"""
