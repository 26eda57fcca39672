"""Tests for the lexidrill API server and file storage."""

import os
import tempfile
import unittest

from fastapi.testclient import TestClient

from server import app as app_module
from server.file_storage import FileStorage

WORDS = [
    {'english': 'apple', 'chinese': '苹果'},
    {'english': ['color', 'colour'], 'chinese': '颜色'},
    {'english': 'book', 'chinese': {'n.': ['书'], 'v.': ['预订']}},
]
ANSWERS = {1: 'apple', 2: 'colour', 3: 'book'}


class ServerTestCase(unittest.TestCase):
    """Runs the app against file storage in a temporary directory."""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.saved_env = {key: os.environ.get(key)
                          for key in ('LEXIDRILL_STORAGE', 'LEXIDRILL_STATE_DIR')}
        os.environ['LEXIDRILL_STORAGE'] = 'file'
        os.environ['LEXIDRILL_STATE_DIR'] = self.tmp.name
        self.client = TestClient(app_module.app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        for key, value in self.saved_env.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        self.tmp.cleanup()

    def upload(self, user_id='alice'):
        response = self.client.post('/api/vocabulary', json={
            'words': WORDS, 'book_name': 'fruit', 'user_id': user_id
        })
        self.assertEqual(response.status_code, 200)
        return response.json()


class TestHealthAndVocabulary(ServerTestCase):

    def test_health(self):
        response = self.client.get('/')
        self.assertEqual(response.json(), {'status': 'ok', 'service': 'lexidrill'})

    def test_default_vocabulary(self):
        data = self.client.get('/api/vocabulary', params={'user_id': 'new'}).json()
        self.assertEqual(data['book_name'], 'default')
        self.assertGreater(data['total'], 10)
        self.assertEqual(data['words'][0]['difficulty'], 'easy')

    def test_upload(self):
        self.assertEqual(self.upload(), {'book_name': 'fruit', 'total': 3})
        data = self.client.get('/api/vocabulary', params={'user_id': 'alice'}).json()
        self.assertEqual([w['id'] for w in data['words']], [1, 2, 3])
        self.assertTrue(app_module.storage.user_exists('alice'))

    def test_upload_without_usable_words(self):
        response = self.client.post('/api/vocabulary', json={'words': [{'english': 'x'}]})
        self.assertEqual(response.status_code, 400)


class TestSingleSession(ServerTestCase):

    def start(self, **extra):
        self.upload()
        payload = {'kind': 'spelling', 'user_id': 'alice', **extra}
        response = self.client.post('/api/session/start', json=payload)
        self.assertEqual(response.status_code, 200)
        return response.json()

    def answer(self, text):
        response = self.client.post('/api/session/answer',
                                    json={'answer': text, 'user_id': 'alice'})
        self.assertEqual(response.status_code, 200)
        return response.json()

    def test_start(self):
        question = self.start()
        self.assertEqual(question['total'], 3)
        self.assertEqual(question['position'], 0)
        self.assertEqual(question['kind'], 'spelling')
        self.assertIsNone(question['options'])
        self.assertIsNone(question['answer'])

    def test_invalid_requests(self):
        self.upload()
        response = self.client.post('/api/session/start', json={'kind': 'essay', 'user_id': 'alice'})
        self.assertEqual(response.status_code, 400)
        response = self.client.post('/api/session/start',
                                    json={'user_id': 'alice', 'requeue': 'never'})
        self.assertEqual(response.status_code, 400)
        response = self.client.get('/api/session/current', params={'user_id': 'nobody'})
        self.assertEqual(response.status_code, 404)

    def test_answer_flow(self):
        question = self.start()
        result = self.answer(ANSWERS[question['word_id']].upper())
        self.assertTrue(result['is_correct'])
        self.assertEqual(result['correct_count'], 1)

        # A second answer to the same question is ignored
        again = self.answer('wrong')
        self.assertTrue(again['is_correct'])
        self.assertEqual(again['incorrect_count'], 0)

        moved = self.client.post('/api/session/next', json={'user_id': 'alice'}).json()
        self.assertEqual(moved['position'], 1)
        self.assertIsNone(moved['answer'])

        back = self.client.post('/api/session/previous', json={'user_id': 'alice'}).json()
        self.assertEqual(back['position'], 0)
        self.assertTrue(back['answer']['is_correct'])

    def test_miss_reaches_error_words(self):
        question = self.start()
        result = self.answer('wrong')
        self.assertFalse(result['is_correct'])
        word_id = question['word_id']

        status = self.client.get('/api/status', params={'user_id': 'alice'}).json()
        self.assertEqual(status['need_practice_words'], 1)
        self.assertTrue(status['has_session'])

        errors = self.client.get('/api/error-words', params={'user_id': 'alice'}).json()
        self.assertEqual([w['id'] for w in errors['words']], [word_id])

        exported = self.client.get('/api/error-words/export', params={'user_id': 'alice'}).json()
        self.assertEqual(exported['count'], 1)
        self.assertEqual(exported['words'][0]['errorCount'], 1)

        response = self.client.delete(f'/api/error-words/{word_id}', params={'user_id': 'alice'})
        self.assertEqual(response.json(), {'removed': True})
        response = self.client.delete('/api/error-words/99', params={'user_id': 'alice'})
        self.assertEqual(response.status_code, 404)

    def test_forgot(self):
        self.start()
        response = self.client.post('/api/session/forgot', json={'user_id': 'alice'})
        result = response.json()
        self.assertTrue(result['is_forgotten'])
        self.assertFalse(result['is_correct'])
        self.assertIn(result['accepted_answer'], ['apple', 'color', 'book'])

    def test_complete_and_review(self):
        self.start()
        first = True
        question = self.client.get('/api/session/current', params={'user_id': 'alice'}).json()
        while not question['is_complete']:
            self.answer('wrong' if first else ANSWERS[question['word_id']])
            first = False
            question = self.client.post('/api/session/next', json={'user_id': 'alice'}).json()

        response = self.client.post('/api/session/answer', json={'answer': 'x', 'user_id': 'alice'})
        self.assertEqual(response.status_code, 400)

        summary = self.client.get('/api/session/summary', params={'user_id': 'alice'}).json()
        self.assertTrue(summary['is_complete'])
        self.assertEqual(summary['incorrect'], 1)
        self.assertEqual(len(summary['errors']), 1)

        review = self.client.post('/api/session/review', json={'user_id': 'alice'}).json()
        self.assertEqual(review['total'], 1)
        self.assertFalse(review['is_complete'])
        self.answer(ANSWERS[review['word_id']])
        status = self.client.get('/api/status', params={'user_id': 'alice'}).json()
        self.assertEqual(status['need_practice_words'], 0)

    def test_error_word_review_requires_errors(self):
        self.upload()
        response = self.client.post('/api/error-words/review', json={'user_id': 'alice'})
        self.assertEqual(response.status_code, 400)


class TestMixedAndRooms(ServerTestCase):

    def test_mixed_session(self):
        response = self.client.post('/api/session/mixed', json={'count': 6, 'user_id': 'carol'})
        question = response.json()
        self.assertEqual(question['mode'], 'comprehensive')
        self.assertEqual(question['total'], 6)

    def test_mixed_session_rejects_empty_budget(self):
        response = self.client.post('/api/session/mixed', json={'count': 0})
        self.assertEqual(response.status_code, 400)

    def test_room_is_shared(self):
        alice = self.client.post('/api/room/2468', json={'user_id': 'alice'}).json()
        bob = self.client.post('/api/room/2468', json={'user_id': 'bob'}).json()
        self.assertEqual(alice['total'], 10)
        self.assertEqual(alice['room_code'], '2468')
        for key in ('word_id', 'kind', 'prompt', 'options'):
            self.assertEqual(alice[key], bob[key])
        alice_items = [(i.kind, i.word_id) for i in app_module.sessions['alice'].state.items]
        bob_items = [(i.kind, i.word_id) for i in app_module.sessions['bob'].state.items]
        self.assertEqual(alice_items, bob_items)

    def test_invalid_room_code(self):
        response = self.client.post('/api/room/12ab', json={'user_id': 'alice'})
        self.assertEqual(response.status_code, 400)

    def test_import_error_words(self):
        response = self.client.post('/api/error-words/import', json={
            'user_id': 'dave',
            'words': [{'english': 'zebra', 'chinese': '斑马', 'errorCount': 2}]
        })
        data = response.json()
        self.assertEqual(data['imported'], 1)
        errors = self.client.get('/api/error-words', params={'user_id': 'dave'}).json()
        self.assertEqual(errors['words'][0]['word'], 'zebra')
        self.assertEqual(errors['words'][0]['times_wrong'], 2)

    def test_import_error_words_with_list_fields(self):
        response = self.client.post('/api/error-words/import', json={
            'user_id': 'dave',
            'words': [{'english': ['grey', 'gray'], 'chinese': '灰色', 'errorCount': '4'}]
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['imported'], 1)
        errors = self.client.get('/api/error-words', params={'user_id': 'dave'}).json()
        self.assertEqual(errors['words'][0]['word'], 'grey')
        self.assertEqual(errors['words'][0]['times_wrong'], 4)


class TestFileStorage(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.storage = FileStorage(config_file=os.path.join(self.tmp.name, 'missing.json'),
                                   state_dir=self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_config(self):
        self.assertEqual(self.storage.load_config(), {})

    def test_state_roundtrip(self):
        self.assertIsNone(self.storage.load_state('erin'))
        self.storage.save_state({'book_name': '词汇'}, 'erin')
        self.storage.save_state({'book_name': 'default'})
        self.assertEqual(self.storage.load_state('erin'), {'book_name': '词汇'})
        self.assertEqual(self.storage.list_users(), ['default', 'erin'])
        self.assertTrue(self.storage.delete_user('erin'))
        self.assertFalse(self.storage.user_exists('erin'))
        self.assertFalse(self.storage.delete_user('erin'))

    def test_corrupt_state(self):
        with open(os.path.join(self.tmp.name, 'lexidrill_state_frank.json'), 'w') as f:
            f.write('{not json')
        self.assertIsNone(self.storage.load_state('frank'))


if __name__ == '__main__':
    unittest.main()
