"""Tests for the contract gateway double and the read model."""

import pytest

from guestbook_core.contract.gateway import InMemoryGuestBook
from guestbook_core.contract.read_model import DATASETS, ReadModel, fetch_snapshot
from guestbook_core.errors import ReadError, SubmissionError
from guestbook_core.models.transaction import Operation, TransactionRequest

ALICE = "0xA11CE00000000000000000000000000000000001"
BOB = "0xB0B0000000000000000000000000000000000002"


async def _confirm(chain, request, sender):
    tx_hash = await chain.submit(request, sender)
    return await chain.await_confirmation(tx_hash)


class TestInMemoryGuestBook:
    @pytest.mark.asyncio
    async def test_state_changes_only_on_confirmation(self):
        chain = InMemoryGuestBook()
        tx_hash = await chain.submit(
            TransactionRequest(operation=Operation.MINT, value=chain.mint_fee), ALICE
        )
        assert await chain.read_access_pass_balance(ALICE) == 0

        assert await chain.await_confirmation(tx_hash) is True
        assert await chain.read_access_pass_balance(ALICE) == 1

    @pytest.mark.asyncio
    async def test_mint_fee_enforced(self):
        chain = InMemoryGuestBook()
        ok = await _confirm(chain, TransactionRequest(operation=Operation.MINT, value=1), ALICE)
        assert ok is False

    @pytest.mark.asyncio
    async def test_messages_ordered_by_arrival(self):
        chain = InMemoryGuestBook(start_time=1000)
        await _confirm(chain, TransactionRequest(operation=Operation.MINT, value=chain.mint_fee), ALICE)
        for i in range(3):
            await _confirm(chain, TransactionRequest(
                operation=Operation.POST_MESSAGE,
                args=("Alice", f"msg {i}"),
                value=chain.message_fee,
            ), ALICE)

        messages = await chain.read_all_messages()
        assert [m.message for m in messages] == ["msg 0", "msg 1", "msg 2"]
        assert messages[0].timestamp < messages[1].timestamp < messages[2].timestamp

    @pytest.mark.asyncio
    async def test_user_todos(self):
        chain = InMemoryGuestBook()
        for sender, title in [(ALICE, "a"), (BOB, "b"), (ALICE, "c")]:
            await _confirm(chain, TransactionRequest(
                operation=Operation.CREATE_TODO, args=(title, ""), value=chain.todo_fee,
            ), sender)

        mine = await chain.read_user_todos(ALICE.lower())
        assert [t.title for t in mine] == ["a", "c"]

    @pytest.mark.asyncio
    async def test_rejected_signature(self):
        chain = InMemoryGuestBook()
        chain.reject_signatures = True
        with pytest.raises(SubmissionError):
            await chain.submit(TransactionRequest(operation=Operation.MINT), ALICE)


class TestReadModel:
    def setup_method(self):
        self.chain = InMemoryGuestBook()
        self.account = ALICE
        self.read_model = ReadModel(self.chain, lambda: self.account)

    @pytest.mark.asyncio
    async def test_refresh_reads_every_dataset_once(self):
        results = await self.read_model.refresh()

        assert set(results) == set(DATASETS)
        assert all(results.values())
        assert self.chain.read_calls == {
            "messages": 1,
            "all_todos": 1,
            "user_todos": 1,
            "balance": 1,
            "todo_fee": 1,
        }
        assert self.read_model.todo_fee == self.chain.todo_fee

    @pytest.mark.asyncio
    async def test_no_account_skips_account_reads(self):
        self.account = None
        self.read_model.balance = 3

        await self.read_model.refresh()

        assert "balance" not in self.chain.read_calls
        assert self.read_model.balance == 0
        assert self.read_model.user_todos == []

    @pytest.mark.asyncio
    async def test_failed_read_keeps_previous_value(self):
        await _confirm(self.chain, TransactionRequest(
            operation=Operation.CREATE_TODO, args=("keep me", ""), value=self.chain.todo_fee,
        ), ALICE)
        await self.read_model.refresh()
        assert len(self.read_model.all_todos) == 1

        self.chain.fail_reads = True
        results = await self.read_model.refresh()

        assert not any(results.values())
        assert [t.title for t in self.read_model.all_todos] == ["keep me"]

    @pytest.mark.asyncio
    async def test_todos_for_view(self):
        await _confirm(self.chain, TransactionRequest(
            operation=Operation.CREATE_TODO, args=("bob's", ""), value=self.chain.todo_fee,
        ), BOB)
        await _confirm(self.chain, TransactionRequest(
            operation=Operation.CREATE_TODO, args=("alice's", ""), value=self.chain.todo_fee,
        ), ALICE)
        await self.read_model.refresh()

        assert len(self.read_model.todos_for("all")) == 2
        assert [t.title for t in self.read_model.todos_for("mine")] == ["alice's"]
        with pytest.raises(ValueError):
            self.read_model.todos_for("others")


class TestFetchSnapshot:
    @pytest.mark.asyncio
    async def test_read_failure_raises_read_error(self):
        chain = InMemoryGuestBook()
        chain.fail_reads = True
        with pytest.raises(ReadError):
            await fetch_snapshot(chain)
