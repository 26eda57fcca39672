"""Console UI for lexidrill."""

import requests

from core.config import KIND_ORDER, KIND_SPELLING, ROOM_QUESTION_COUNT
from cli.api_client import LexidrillAPIClient

KIND_LABELS = {
    'spelling': 'Spell the word',
    'meaning-choice': 'Choose the meaning',
    'word-choice': 'Choose the word'
}


class ConsoleUI:
    """Console user interface for lexidrill."""

    def __init__(self, client: LexidrillAPIClient):
        self.client = client

    def print_status(self, status: dict):
        """Print word book progress."""
        print('\n' + '=' * 50)
        print(f'WORD BOOK: {status["book_name"]}')
        print('=' * 50)
        print(f'Total words: {status["total_words"]}')
        print(f'Mastered: {status["mastered_words"]}')
        print(f'Need practice: {status["need_practice_words"]}')
        print(f'Progress: {status["progress_percentage"]}%')
        print('=' * 50 + '\n')

    def print_question(self, question: dict):
        """Print the current question with its options."""
        print('-' * 40)
        label = KIND_LABELS.get(question['kind'], question['kind'])
        requeued = ' (again)' if question['is_requeued'] else ''
        print(f'[{question["position"] + 1}/{question["total"]}] {label}{requeued}')
        print(f'\n>>> {question["prompt"]}\n')
        for index, option in enumerate(question.get('options') or [], start=1):
            print(f'  {index}. {option}')
        if question.get('answer'):
            answer = question['answer']
            mark = 'correct' if answer['is_correct'] else 'wrong'
            print(f'\n(answered: {answer["given_answer"] or "-"}, {mark})')

    def print_result(self, result: dict):
        if result['is_forgotten']:
            print(f'Answer: {result["accepted_answer"]}')
        elif result['is_correct']:
            print('Correct!')
        else:
            print(f'Wrong! Correct answer: {result["accepted_answer"]}')
        print(f'Score: {result["correct_count"]} right, {result["incorrect_count"]} wrong')

    def print_summary(self, summary: dict):
        """Print the end-of-session results."""
        print('\n' + '=' * 50)
        print('SESSION COMPLETE')
        print('=' * 50)
        print(f'Questions: {summary["total"]}')
        print(f'Correct: {summary["correct"]}')
        print(f'Score: {summary["score"]}')
        print(f'Duration: {summary["duration_seconds"]}s')
        if summary['mode'] == 'comprehensive':
            for kind, count in summary['error_distribution'].items():
                print(f'  {KIND_LABELS.get(kind, kind)} errors: {count}')
        print('=' * 50 + '\n')

    def choose_session(self) -> dict | None:
        """Ask which kind of session to start."""
        print('Modes:')
        for index, kind in enumerate(KIND_ORDER, start=1):
            print(f'  {index}. {KIND_LABELS[kind]}')
        print(f'  {len(KIND_ORDER) + 1}. Comprehensive training')
        print(f'  {len(KIND_ORDER) + 2}. Friend battle (room code)')
        choice = input('Mode ==> ').strip()
        if choice == 'exit':
            return None
        if choice == str(len(KIND_ORDER) + 1):
            count = input('Number of questions ==> ').strip()
            return self.client.start_mixed(int(count) if count.isdigit() else ROOM_QUESTION_COUNT)
        if choice == str(len(KIND_ORDER) + 2):
            return self.client.join_room(input('Room code ==> ').strip())
        if choice.isdigit() and 1 <= int(choice) <= len(KIND_ORDER):
            return self.client.start_session(KIND_ORDER[int(choice) - 1])
        return self.client.start_session(KIND_SPELLING)

    def resolve_answer(self, question: dict, user_input: str) -> str:
        """Map an option number to its text for choice questions."""
        options = question.get('options') or []
        if options and user_input.isdigit() and 1 <= int(user_input) <= len(options):
            return options[int(user_input) - 1]
        return user_input

    def run(self):
        """Run the main application loop."""
        try:
            health = self.client.health_check()
            print(f"Connected to lexidrill server ({health['service']})")
        except requests.RequestException:
            print(f"Error: Cannot connect to server at {self.client.base_url}")
            print("Make sure the server is running: python run_server.py")
            return

        self.print_status(self.client.get_status())
        print('Commands: "forgot" to reveal, "prev" to go back, "status" for progress, "exit" to quit\n')

        try:
            question = self.choose_session()
        except requests.HTTPError as e:
            print(f"Error starting session: {e}")
            return
        if question is None:
            return

        while True:
            if question['is_complete']:
                self.print_summary(self.client.get_summary())
                again = input('Review mistakes? [y/N] ==> ').strip().lower()
                if again != 'y':
                    print('Goodbye!')
                    return
                try:
                    question = self.client.review_errors()
                except requests.HTTPError:
                    print('Nothing to review. Goodbye!')
                    return
                continue

            self.print_question(question)
            user_input = input('==> ').strip()

            if user_input.lower() == 'exit':
                print('Goodbye!')
                return
            elif user_input.lower() == 'status':
                self.print_status(self.client.get_status())
                continue
            elif user_input.lower() == 'prev':
                question = self.client.previous_question()
                continue
            elif user_input == '' and question.get('answer'):
                question = self.client.next_question()
                continue
            elif user_input == '':
                continue

            if question.get('answer'):
                question = self.client.next_question()
                continue
            if user_input.lower() == 'forgot':
                result = self.client.forgot()
            else:
                result = self.client.submit_answer(self.resolve_answer(question, user_input))
            self.print_result(result)
            question = self.client.next_question()
