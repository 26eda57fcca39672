"""Configuration constants for lexidrill."""

# Question kinds, in the order the mixed-mode budget is distributed
KIND_SPELLING = 'spelling'              # meaning shown, answer typed
KIND_MEANING_CHOICE = 'meaning-choice'  # word shown, pick the meaning
KIND_WORD_CHOICE = 'word-choice'        # meaning shown, pick the word
KIND_ORDER = (KIND_SPELLING, KIND_MEANING_CHOICE, KIND_WORD_CHOICE)

MODE_COMPREHENSIVE = 'comprehensive'

# Priority scoring
NEVER_STUDIED_BONUS = 100
ERROR_WEIGHT = 20
ERROR_RECENCY_MAX = 50        # Urgency right after a miss
ERROR_RECENCY_DECAY = 5       # Lost per day since the miss
EXPOSURE_MAX = 30
EXPOSURE_DECAY = 3            # Lost per study
INACCURACY_WEIGHT = 40
PROFICIENCY_WEIGHT = 0.5
MEMORY_CHECKPOINTS = (1, 6, 24, 48, 72)  # hours
MEMORY_CHECKPOINT_WINDOW = 1             # hours either side
MEMORY_CHECKPOINT_BONUS = 30

# Difficulty labels by error count
HARD_ERROR_COUNT = 3
MEDIUM_ERROR_COUNT = 1

# Error requeue
REQUEUE_INTERVAL = 5                # Single-mode flows
REQUEUE_RANDOM_CHOICES = (2, 3)

# Multiple choice
OPTION_COUNT = 4

# Friend battle rooms
ROOM_QUESTION_COUNT = 10
