class Messages:
    """Player-facing texts. RU is the default language and the fallback."""

    DEFAULT_LANG = "RU"

    _TEXTS = {
        "RU": {
            "WELCOME": "🎬 Добро пожаловать в MovieQuiz!\n\nОтвечайте «Да» или «Нет» на вопросы о рейтингах популярных фильмов. В раунде {amount} вопросов.",
            "PLAY_BTN": "🎬 Играть",
            "STATS_BTN": "📊 Статистика",
            "YES_BTN": "Да",
            "NO_BTN": "Нет",
            "QUESTION_GREATER": "Рейтинг этого фильма больше чем {threshold}?",
            "QUESTION_LESS": "Рейтинг этого фильма меньше чем {threshold}?",
            "ANSWER_CORRECT": "✅ Верно!",
            "ANSWER_WRONG": "❌ Неверно",
            "ROUND_OVER_TITLE": "Этот раунд окончен!",
            "RESULT_TEXT": (
                "Ваш результат: {correct}/{total}\n"
                "Количество сыгранных квизов: {games_count}\n"
                "Рекорд: {best_correct}/{best_total} ({best_date})\n"
                "Средняя точность: {accuracy}%"
            ),
            "RESULT_SCORE_ONLY": "Ваш результат: {correct}/{total}",
            "PLAY_AGAIN_BTN": "Сыграть ещё раз",
            "ERROR_TITLE": "Ошибка",
            "RETRY_BTN": "Попробовать ещё раз",
            "CATALOG_LOAD_ERROR": "Не удалось загрузить список фильмов",
            "EMPTY_CATALOG_ERROR": "Список фильмов пуст",
            "IMAGE_LOAD_ERROR": "Не удалось загрузить постер фильма",
            "NO_ACTIVE_GAME": "Нет активной игры. Нажмите /start",
            "STATS_TEXT": (
                "📊 Ваша статистика\n\n"
                "Количество сыгранных квизов: {games_count}\n"
                "Рекорд: {best_correct}/{best_total} ({best_date})\n"
                "Средняя точность: {accuracy}%"
            ),
            "NO_STATS": "Вы ещё не сыграли ни одного квиза.",
            "NO_DATE": "—",
        },
        "EN": {
            "WELCOME": "🎬 Welcome to MovieQuiz!\n\nAnswer «Yes» or «No» to questions about the ratings of popular movies. A round has {amount} questions.",
            "PLAY_BTN": "🎬 Play",
            "STATS_BTN": "📊 Statistics",
            "YES_BTN": "Yes",
            "NO_BTN": "No",
            "QUESTION_GREATER": "Is the rating of this movie greater than {threshold}?",
            "QUESTION_LESS": "Is the rating of this movie less than {threshold}?",
            "ANSWER_CORRECT": "✅ Correct!",
            "ANSWER_WRONG": "❌ Wrong",
            "ROUND_OVER_TITLE": "This round is over!",
            "RESULT_TEXT": (
                "Your result: {correct}/{total}\n"
                "Quizzes played: {games_count}\n"
                "Record: {best_correct}/{best_total} ({best_date})\n"
                "Average accuracy: {accuracy}%"
            ),
            "RESULT_SCORE_ONLY": "Your result: {correct}/{total}",
            "PLAY_AGAIN_BTN": "Play again",
            "ERROR_TITLE": "Error",
            "RETRY_BTN": "Try again",
            "CATALOG_LOAD_ERROR": "Failed to load the movie list",
            "EMPTY_CATALOG_ERROR": "The movie list is empty",
            "IMAGE_LOAD_ERROR": "Image load error",
            "NO_ACTIVE_GAME": "No active game. Send /start",
            "STATS_TEXT": (
                "📊 Your statistics\n\n"
                "Quizzes played: {games_count}\n"
                "Record: {best_correct}/{best_total} ({best_date})\n"
                "Average accuracy: {accuracy}%"
            ),
            "NO_STATS": "You have not played any quiz yet.",
            "NO_DATE": "—",
        },
    }

    @classmethod
    def get(cls, key: str, lang: str = DEFAULT_LANG) -> str:
        texts = cls._TEXTS.get(lang, cls._TEXTS[cls.DEFAULT_LANG])
        if key in texts:
            return texts[key]
        return cls._TEXTS[cls.DEFAULT_LANG].get(key, key)
