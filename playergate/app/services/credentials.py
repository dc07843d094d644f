# playergate/app/services/credentials.py
"""
Credential store: accounts, password verifiers and security questions.

The store never sees raw tokens from callers; it hashes and matches
through the injected Verifier. It flushes but never commits: the
AuthService owns the transaction boundary.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from playergate.app.core.errors import IdentityConflict, InvalidCredentials, NotFound
from playergate.app.models.account import Account
from playergate.app.models.security_question import SecurityQuestion
from playergate.app.security.hashing import Verifier


def security_question_query(identity: str, for_update: bool = False) -> Select:
    stmt = (
        select(SecurityQuestion)
        .join(Account, Account.id == SecurityQuestion.account_id)
        .where(Account.identity == identity)
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update(of=SecurityQuestion)
    return stmt


class CredentialStore:

    def __init__(self, session: AsyncSession, verifier: Verifier):
        self.session = session
        self.verifier = verifier

    async def find_by_identity(self, identity: str) -> Optional[Account]:
        result = await self.session.execute(
            select(Account)
            .where(Account.identity == identity)
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def register(self, identity: str, password: str, question: str, answer: str) -> int:
        """
        Create an account and its security question.

        Both rows are flushed in the caller's transaction; the question is
        only written once the account row exists.

        Raises:
            IdentityConflict: identity already taken (including a
                concurrent registration losing the unique-constraint race)
        """
        if await self.find_by_identity(identity) is not None:
            raise IdentityConflict()

        account = Account(
            identity=identity,
            hashed_password=self.verifier.hash(password),
        )
        self.session.add(account)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise IdentityConflict() from e

        self.session.add(SecurityQuestion(
            account_id=account.id,
            question=question,
            answer_hash=self.verifier.hash(answer),
            failed_attempts=0,
        ))
        await self.session.flush()
        return account.id

    async def verify_password(self, identity: str, password: str) -> int:
        """
        Resolve identity + password to an account id.

        Unknown identity and wrong password raise the same error, and an
        unknown identity still pays for one verifier comparison.
        """
        account = await self.find_by_identity(identity)
        if account is None:
            self.verifier.matches(password, self.verifier.dummy_token)
            raise InvalidCredentials()

        if not self.verifier.matches(password, account.hashed_password):
            raise InvalidCredentials()

        return account.id

    async def get_security_question(self, identity: str, for_update: bool = False) -> SecurityQuestion:
        """
        Load the question row for an identity.

        With for_update=True the row stays locked until the transaction
        ends, so concurrent answer checks see each other's failure
        counts. SQLite has no row locks; BEGIN IMMEDIATE already
        serialises writers there.

        Raises:
            NotFound: unknown identity or no question on record
        """
        result = await self.session.execute(security_question_query(identity, for_update))
        question = result.scalars().first()
        if question is None:
            raise NotFound("Security question not found")
        return question

    def verify_answer(self, question: SecurityQuestion, answer: str) -> bool:
        """Pure comparison against the stored answer verifier."""
        return self.verifier.matches(answer, question.answer_hash)

    async def record_failed_answer(self, question: SecurityQuestion) -> None:
        # Increment in SQL so concurrent failures are all counted
        await self.session.execute(
            update(SecurityQuestion)
            .where(SecurityQuestion.id == question.id)
            .values(
                failed_attempts=SecurityQuestion.failed_attempts + 1,
                last_attempt_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )

    async def clear_failed_answers(self, question: SecurityQuestion) -> None:
        question.failed_attempts = 0
        question.last_attempt_at = None
        await self.session.flush()

    async def reset_password(self, account_id: int, new_password: str) -> None:
        """
        Overwrite the password verifier unconditionally.

        Raises:
            NotFound: no account with this id
        """
        account = await self.session.get(Account, account_id)
        if account is None:
            raise NotFound("Account not found")

        account.hashed_password = self.verifier.hash(new_password)
        await self.session.flush()
