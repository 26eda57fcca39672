"""Word book loading, multiple-choice options and error-word exchange."""

import random

from .config import KIND_MEANING_CHOICE, OPTION_COUNT
from .models import VocabularyItem, WordStats
from .prng import Prng
from .utils import utcnow, parse_timestamp, format_timestamp

# Built-in word book used until the user uploads one
DEFAULT_WORD_BOOK = [
    {'english': 'apple', 'chinese': '苹果'},
    {'english': 'book', 'chinese': {'n.': ['书', '书籍'], 'v.': ['预订']}},
    {'english': 'run', 'chinese': {'v.': ['跑', '运行'], 'n.': ['跑步']}},
    {'english': ['color', 'colour'], 'chinese': '颜色'},
    {'english': 'water', 'chinese': '水'},
    {'english': 'friend', 'chinese': '朋友'},
    {'english': 'school', 'chinese': '学校'},
    {'english': 'happy', 'chinese': '快乐的', 'related': ['glad', 'merry']},
    {'english': 'beautiful', 'chinese': '美丽的'},
    {'english': 'teacher', 'chinese': '老师'},
    {'english': 'family', 'chinese': '家庭'},
    {'english': 'weather', 'chinese': '天气', 'related': ['whether']},
    {'english': 'light', 'chinese': {'n.': ['光'], 'adj.': ['轻的', '明亮的']}},
    {'english': 'important', 'chinese': '重要的'},
    {'english': 'question', 'chinese': '问题'},
    {'english': 'answer', 'chinese': {'n.': ['答案'], 'v.': ['回答']}},
]

ENGLISH_KEYS = ('english', 'en', 'word')
MEANING_KEYS = ('chinese', 'cn', 'meaning')
RELATED_KEYS = ('related', 'relatedForms', 'related_forms')


class SimpleAnswer:
    """A single accepted form."""

    def __init__(self, text: str):
        self.text = text.strip()

    def display(self) -> str:
        return self.text

    def forms(self) -> list[str]:
        return [self.text] if self.text else []


class MultiForm:
    """Several accepted forms; the first one is displayed."""

    def __init__(self, texts):
        self.texts = [t.strip() for t in texts if isinstance(t, str) and t.strip()]

    def display(self) -> str:
        return self.texts[0] if self.texts else ''

    def forms(self) -> list[str]:
        return list(self.texts)


class GroupedMeaning:
    """Meanings grouped by part of speech, e.g. {'n.': ['书'], 'v.': ['预订']}."""

    def __init__(self, groups: dict):
        self.groups = {}
        for pos, meanings in groups.items():
            values = [meanings] if isinstance(meanings, str) else list(meanings or [])
            values = [m.strip() for m in values if isinstance(m, str) and m.strip()]
            if values:
                self.groups[str(pos).strip()] = values

    def display(self) -> str:
        return '; '.join(f"{pos} {', '.join(values)}" for pos, values in self.groups.items())

    def forms(self) -> list[str]:
        result = []
        for values in self.groups.values():
            for value in values:
                if value not in result:
                    result.append(value)
        return result


def resolve_answer(raw) -> SimpleAnswer | MultiForm | GroupedMeaning | None:
    """Classify a raw answer/prompt field into its shape."""
    if isinstance(raw, str):
        return SimpleAnswer(raw)
    if isinstance(raw, (list, tuple)):
        return MultiForm(raw)
    if isinstance(raw, dict):
        return GroupedMeaning(raw)
    return None


def _first_present(entry: dict, keys):
    for key in keys:
        value = entry.get(key)
        if value:
            return value
    return None


def parse_entry(entry: dict, default_id) -> VocabularyItem | None:
    """Build a VocabularyItem from one raw word-book entry, or None if unusable."""
    if not isinstance(entry, dict):
        return None
    english = resolve_answer(_first_present(entry, ENGLISH_KEYS))
    meaning = resolve_answer(_first_present(entry, MEANING_KEYS))
    if english is None or meaning is None:
        return None
    if not english.forms() or not meaning.forms():
        return None
    related = _first_present(entry, RELATED_KEYS) or []
    if isinstance(related, str):
        related = [related]
    prompt = meaning.display()
    prompt_forms = [prompt] + [form for form in meaning.forms() if form != prompt]
    return VocabularyItem(
        entry.get('id', default_id),
        english.forms(),
        prompt,
        prompt_forms=prompt_forms,
        related_forms=[r.strip() for r in related if isinstance(r, str) and r.strip()]
    )


def parse_vocabulary(data) -> list[VocabularyItem]:
    """Parse an uploaded word book (a list of entries, or a single entry).

    Entries missing either the word or its meaning are skipped. Ids default to
    the entry's 1-based position.
    """
    entries = data if isinstance(data, list) else [data]
    words = []
    for index, entry in enumerate(entries):
        item = parse_entry(entry, index + 1)
        if item is not None:
            words.append(item)
    return words


def get_default_vocabulary() -> list[VocabularyItem]:
    return parse_vocabulary(DEFAULT_WORD_BOOK)


def _option_text(item: VocabularyItem, kind: str) -> str:
    return item.prompt if kind == KIND_MEANING_CHOICE else item.canonical


def build_options(vocabulary: list, item: VocabularyItem, kind: str,
                  count: int = OPTION_COUNT, rng=None) -> list[str]:
    """Correct option plus distractors for a choice question, shuffled.

    Related forms listed on the word are preferred as distractors for word
    choices; the rest are drawn from other words whose option text differs.
    """
    rng = rng or random
    correct = _option_text(item, kind)
    wanted = max(0, count - 1)

    distractors = []
    if kind != KIND_MEANING_CHOICE:
        for form in item.related_forms:
            if form != correct and form not in distractors:
                distractors.append(form)
        distractors = distractors[:wanted]

    others = []
    for word in vocabulary:
        text = _option_text(word, kind)
        if text and text != correct and text not in distractors and text not in others:
            others.append(text)
    others = _shuffled(others, rng)
    distractors.extend(others[:wanted - len(distractors)])

    options = [correct] + distractors
    return _shuffled(options, rng)


def _shuffled(values: list, rng) -> list:
    if isinstance(rng, Prng):
        return rng.shuffle(values)
    result = list(values)
    rng.shuffle(result)
    return result


def export_error_words(vocabulary: list, stats_store, now=None) -> dict:
    """Serialize the error set in the word-exchange JSON format."""
    now = now or utcnow()
    words = []
    for item in vocabulary:
        stats = stats_store.get(item.id)
        if not stats or not stats.is_in_error_set:
            continue
        words.append({
            'id': item.id,
            'english': item.canonical,
            'chinese': item.prompt,
            'errorCount': stats.times_wrong or 1,
            'lastErrorTime': format_timestamp(stats.last_wrong_at or now)
        })
    return {
        'words': words,
        'exportDate': now.isoformat(),
        'count': len(words)
    }


def _error_count(value) -> int:
    """Error count from an import entry; anything unusable counts as one miss."""
    try:
        count = int(value)
    except (TypeError, ValueError):
        return 1
    return count if count > 0 else 1


def import_error_words(vocabulary: list, stats_store, payload: dict,
                       now=None) -> tuple[list[VocabularyItem], int]:
    """Merge exported error words into a vocabulary and its stats.

    Words match on (canonical word, meaning). Matches keep the larger error
    count and the later error time; unknown words are appended with the next
    free id. Every imported word lands in the error set. Returns the new
    vocabulary list and the number of words imported.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get('words'), list):
        raise ValueError("Import data must contain a 'words' list")
    now = now or utcnow()
    merged = list(vocabulary)
    by_key = {(item.canonical, item.prompt): item for item in merged}
    imported = 0

    for raw in payload['words']:
        if not isinstance(raw, dict):
            continue
        english = resolve_answer(raw.get('english'))
        chinese = resolve_answer(raw.get('chinese'))
        if english is None or chinese is None or not english.forms() or not chinese.forms():
            continue
        error_count = _error_count(raw.get('errorCount'))
        error_time = parse_timestamp(raw.get('lastErrorTime')) or now

        key = (english.display(), chinese.display())
        item = by_key.get(key)
        if item is None:
            numeric_ids = [w.id for w in merged if isinstance(w.id, int)]
            prompt = chinese.display()
            item = VocabularyItem(
                max(numeric_ids, default=0) + 1,
                english.forms(),
                prompt,
                prompt_forms=[prompt] + [f for f in chinese.forms() if f != prompt]
            )
            merged.append(item)
            by_key[key] = item

        stats = stats_store.get(item.id) or WordStats()
        stats.times_wrong = max(stats.times_wrong, error_count)
        # Keeps accuracy within [0, 1]
        stats.times_studied = max(stats.times_studied, stats.times_wrong)
        if stats.last_wrong_at is None or error_time > stats.last_wrong_at:
            stats.last_wrong_at = error_time
        stats.is_in_error_set = True
        stats_store.set(item.id, stats)
        imported += 1

    return merged, imported
