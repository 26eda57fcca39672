from .models import VocabularyItem, WordStats, ScoredWord, SessionItem, AnswerRecord
from .interfaces import StatsStore, Storage
from .stats import InMemoryStatsStore, overview, error_words
from .prng import Prng
from .scheduler import (
    score_word, proficiency, difficulty_level,
    assign_probabilities, weighted_shuffle,
    score_and_build_session, build_review_session
)
from .session import SessionState, RequeuePolicy, FixedInterval, RandomInterval, check_answer
from .mixed import (
    partition_counts, build_mixed_questions, build_mixed_session,
    build_room_session, build_retry_questions, validate_room_code
)
from .vocabulary import (
    parse_vocabulary, get_default_vocabulary, build_options,
    export_error_words, import_error_words
)
from .config import (
    KIND_SPELLING, KIND_MEANING_CHOICE, KIND_WORD_CHOICE, KIND_ORDER,
    MODE_COMPREHENSIVE, ROOM_QUESTION_COUNT
)

__all__ = [
    'VocabularyItem', 'WordStats', 'ScoredWord', 'SessionItem', 'AnswerRecord',
    'StatsStore', 'Storage',
    'InMemoryStatsStore', 'overview', 'error_words',
    'Prng',
    'score_word', 'proficiency', 'difficulty_level',
    'assign_probabilities', 'weighted_shuffle',
    'score_and_build_session', 'build_review_session',
    'SessionState', 'RequeuePolicy', 'FixedInterval', 'RandomInterval', 'check_answer',
    'partition_counts', 'build_mixed_questions', 'build_mixed_session',
    'build_room_session', 'build_retry_questions', 'validate_room_code',
    'parse_vocabulary', 'get_default_vocabulary', 'build_options',
    'export_error_words', 'import_error_words',
    'KIND_SPELLING', 'KIND_MEANING_CHOICE', 'KIND_WORD_CHOICE', 'KIND_ORDER',
    'MODE_COMPREHENSIVE', 'ROOM_QUESTION_COUNT'
]
