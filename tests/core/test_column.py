"""Tests for Column hand evaluation."""

from hypothesis import given, strategies as st

from core.column import Column
from conftest import make_card, make_column, rank_strategy


class TestColumnTotals:
    """Totals, soft/hard and bust."""

    def test_empty_column(self, empty_column):
        """Test empty column properties."""
        assert len(empty_column) == 0
        assert empty_column.total == 0
        assert not empty_column.is_soft
        assert not empty_column.is_busted
        assert not empty_column.is_locked
        assert empty_column.effective_total == 0

    def test_lone_ace_counts_eleven_but_is_not_soft(self):
        """A lone ace totals 11 but is never soft."""
        column = make_column("A")
        assert column.total == 11
        assert not column.is_soft

    def test_soft_total(self):
        """A-6 is a soft 17."""
        column = make_column("A", "6")
        assert column.total == 17
        assert column.is_soft

    def test_soft_to_hard_transition(self):
        """Ace drops from 11 to 1 when it would bust."""
        column = make_column("A", "5")
        assert column.total == 16
        assert column.is_soft

        column.add_card(make_card("8"))
        assert column.total == 14
        assert column.is_hard

    def test_multiple_aces(self):
        """Only one ace can ever count as 11."""
        column = make_column("A", "A")
        assert column.total == 12
        assert column.is_soft

        column.add_card(make_card("A"))
        assert column.total == 13

        column.add_card(make_card("9"))
        assert column.total == 12
        assert column.is_hard

    def test_bust(self, bust_column):
        """K-Q-5 busts at 25."""
        assert bust_column.total == 25
        assert bust_column.is_busted

    def test_effective_total_caps_at_21(self, bust_column):
        """A busted column's effective total is capped."""
        assert bust_column.effective_total == 21

    def test_totals_are_pure(self):
        """Derived queries have no side effects."""
        column = make_column("A", "7")
        for _ in range(3):
            assert column.total == 18
            assert column.is_soft
            assert column.effective_total == 18
        assert len(column) == 2

    @given(st.lists(rank_strategy, min_size=1, max_size=5), st.randoms())
    def test_total_independent_of_order(self, ranks, random):
        """The final total depends only on the multiset of ranks."""
        shuffled = list(ranks)
        random.shuffle(shuffled)

        def total_of(order):
            column = Column()
            for rank in order:
                column.cards.append(make_card(rank.value))
            return column.total

        assert total_of(ranks) == total_of(shuffled)


class TestColumnLocking:
    """Hard-21 lock, five-card charlie and locked-column policy."""

    def test_hard_21_locks(self, hard_21_column):
        """K-5-6 is a hard 21 and locks immediately."""
        assert hard_21_column.total == 21
        assert not hard_21_column.is_soft
        assert hard_21_column.is_locked
        assert not hard_21_column.is_five_card_charlie

    def test_soft_21_does_not_lock(self, soft_21_column):
        """A-K is a soft 21 and stays open."""
        assert soft_21_column.total == 21
        assert soft_21_column.is_soft
        assert not soft_21_column.is_locked

    def test_soft_21_can_keep_building(self, soft_21_column):
        """A soft 21 takes more cards and turns hard."""
        assert soft_21_column.add_card(make_card("K"))
        assert soft_21_column.total == 21
        assert soft_21_column.is_locked

    def test_ace_ace_nine_is_soft_21(self):
        """A-A-9 counts one ace high: soft 21, not locked."""
        column = make_column("A", "A", "9")
        assert column.total == 21
        assert column.is_soft
        assert not column.is_locked

    def test_locked_column_ignores_cards(self, hard_21_column):
        """Adding to a locked column is a no-op."""
        assert not hard_21_column.add_card(make_card("2"))
        assert len(hard_21_column) == 3
        assert hard_21_column.total == 21

    def test_five_card_charlie(self):
        """Five cards without busting lock as a charlie."""
        column = make_column("2", "3", "2", "3", "4")
        assert column.total == 14
        assert column.is_five_card_charlie
        assert column.is_locked
        assert column.effective_total == 21

    def test_five_card_charlie_at_21(self):
        """A five-card 21 is a charlie, not a plain hard lock."""
        column = make_column("2", "3", "4", "5", "7")
        assert column.total == 21
        assert column.is_five_card_charlie

    def test_five_card_bust_is_not_charlie(self):
        """Busting on the fifth card is not a charlie."""
        column = make_column("2", "3", "4", "5", "K")
        assert column.total == 24
        assert column.is_busted
        assert not column.is_five_card_charlie
        assert not column.is_locked

    def test_four_cards_is_not_charlie(self):
        """Four cards never make a charlie."""
        column = make_column("2", "3", "4", "5")
        assert not column.is_five_card_charlie
        assert not column.is_locked

    def test_inconsistent_lock_is_repaired(self):
        """A locked column whose total is not 21 unlocks on re-evaluation."""
        column = make_column("5", "6")
        column.is_locked = True
        column._update_lock()
        assert not column.is_locked

    def test_reset(self, hard_21_column):
        """Reset clears cards and flags."""
        hard_21_column.reset()
        assert len(hard_21_column) == 0
        assert not hard_21_column.is_locked
        assert not hard_21_column.is_five_card_charlie

    def test_str(self, soft_21_column, bust_column):
        """Test string rendering."""
        assert "soft 21" in str(soft_21_column)
        assert "BUST" in str(bust_column)
