"""The active user's working set."""

from fluent_tutor.activity.ledger import ActivityLedger
from fluent_tutor.conversation.dialogue import TutoringDialogue
from fluent_tutor.conversation.registry import SessionRegistry
from fluent_tutor.storage.context import UserContext
from fluent_tutor.storage.user_profile import ProfileStore
from fluent_tutor.tutor.client import TutorService
from fluent_tutor.vocabulary.ledger import VocabularyLedger


class Workspace:
    """Every component of one logged-in user, built on a shared context.

    Args:
        context: Namespace of the logged-in user.
        tutor: Tutor collaborator for turns and word lookups.
        history_window: Prior messages sent with each tutor turn.
    """

    def __init__(self, context: UserContext, tutor: TutorService, history_window: int = 6):
        self.context = context
        self.profile = ProfileStore(context)
        self.vocabulary = VocabularyLedger(context, tutor)
        self.sessions = SessionRegistry(context)
        self.activity = ActivityLedger(context)
        self.dialogue = TutoringDialogue(context, self.sessions, tutor, history_window)

    @property
    def user_id(self) -> str:
        return self.context.user_id

    def reset(self) -> None:
        self.vocabulary.reset()
        self.sessions.reset()
        self.activity.reset()
        self.profile.reset()

    def close(self) -> None:
        self.sessions.close()
        self.vocabulary.clear_selection()
        self.context.close()
