"""Behavioral tests run against every RecordStore backend."""

import pytest

from core.exceptions import (
    AddressNotFoundError,
    CustomerNotFoundError,
    DuplicatePhoneError,
    InvalidInputError,
    LastAddressError,
)
from core.models import AddressUpdate, CustomerQuery, CustomerUpdate, SortField, SortOrder


@pytest.fixture(params=["memory", "postgres"])
def store(request):
    """Each test runs once per backend; postgres skips without a database."""
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("postgres_store")


def primaries(addresses):
    return [a.id for a in addresses if a.is_primary]


class TestCreateCustomer:
    """Tests for create_customer."""

    def test_creates_customer_with_addresses(self, store, make_customer, make_address):
        created = store.create_customer(
            make_customer(),
            [make_address(city="Pune"), make_address(city="Mumbai")],
        )

        assert created.id is not None
        assert created.first_name == "Asha"
        assert created.created_at.tzinfo is not None
        assert [a.city for a in created.addresses] == ["Pune", "Mumbai"]
        assert all(a.customer_id == created.id for a in created.addresses)

    def test_first_address_primary_by_default(self, store, make_customer, make_address):
        created = store.create_customer(
            make_customer(), [make_address(), make_address(), make_address()]
        )

        assert [a.is_primary for a in created.addresses] == [True, False, False]

    def test_explicit_primary_respected(self, store, make_customer, make_address):
        created = store.create_customer(
            make_customer(), [make_address(), make_address(primary=True)]
        )

        assert [a.is_primary for a in created.addresses] == [False, True]

    def test_only_first_of_several_flagged_is_primary(self, store, make_customer, make_address):
        created = store.create_customer(
            make_customer(),
            [make_address(), make_address(primary=True), make_address(primary=True)],
        )

        assert [a.is_primary for a in created.addresses] == [False, True, False]

    def test_duplicate_phone_rejected(self, store, make_customer, make_address):
        store.create_customer(make_customer(phone="2222222222"), [make_address()])

        with pytest.raises(DuplicatePhoneError):
            store.create_customer(
                make_customer(phone="2222222222", first="Other"),
                [make_address(city="Delhi"), make_address(city="Agra")],
            )

        page = store.list_customers(CustomerQuery())
        assert page.pagination.total == 1

    def test_requires_an_address(self, store, make_customer):
        with pytest.raises(InvalidInputError):
            store.create_customer(make_customer(), [])

        assert store.list_customers(CustomerQuery()).pagination.total == 0


class TestGetCustomer:
    """Tests for get_customer."""

    def test_returns_customer_with_addresses(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address()])

        found = store.get_customer(created.id)

        assert found.id == created.id
        assert found.phone_number == "1111111111"
        assert len(found.addresses) == 1
        assert found.addresses[0].is_primary is True

    def test_missing_raises(self, store):
        with pytest.raises(CustomerNotFoundError):
            store.get_customer(999)


class TestListCustomers:
    """Tests for list_customers."""

    @pytest.fixture
    def five_customers(self, store, make_customer, make_address):
        return [
            store.create_customer(make_customer(phone=f"900000000{i}", first=name), [make_address()])
            for i, name in enumerate(["Eve", "Bob", "Dan", "Amy", "Cal"], start=1)
        ]

    def test_newest_first_by_default(self, store, five_customers):
        page = store.list_customers(CustomerQuery(page=1, limit=2))

        assert [c.id for c in page.customers] == [five_customers[4].id, five_customers[3].id]

    def test_last_page_holds_oldest(self, store, five_customers):
        page = store.list_customers(CustomerQuery(page=3, limit=2))

        assert [c.id for c in page.customers] == [five_customers[0].id]

    def test_pagination_metadata(self, store, five_customers):
        page = store.list_customers(CustomerQuery(page=2, limit=2))

        assert page.pagination.page == 2
        assert page.pagination.limit == 2
        assert page.pagination.total == 5
        assert page.pagination.total_pages == 3

    def test_out_of_range_page_is_empty(self, store, five_customers):
        page = store.list_customers(CustomerQuery(page=10, limit=2))

        assert page.customers == []
        assert page.pagination.total == 5

    def test_sorts_by_first_name_ascending(self, store, five_customers):
        page = store.list_customers(
            CustomerQuery(limit=5, sort_by=SortField.FIRST_NAME, order=SortOrder.ASC)
        )

        assert [c.first_name for c in page.customers] == ["Amy", "Bob", "Cal", "Dan", "Eve"]

    def test_mixed_case_names_sort_by_code_point(self, store, make_customer, make_address):
        for i, name in enumerate(["bea", "Zed", "amy", "Cal"], start=1):
            store.create_customer(make_customer(phone=f"910000000{i}", last=name), [make_address()])

        page = store.list_customers(
            CustomerQuery(limit=5, sort_by=SortField.LAST_NAME, order=SortOrder.ASC)
        )

        assert [c.last_name for c in page.customers] == ["Cal", "Zed", "amy", "bea"]

    def test_sorts_by_id_descending(self, store, five_customers):
        page = store.list_customers(CustomerQuery(limit=5, sort_by=SortField.ID))

        ids = [c.id for c in page.customers]
        assert ids == sorted(ids, reverse=True)

    def test_empty_store(self, store):
        page = store.list_customers(CustomerQuery())

        assert page.customers == []
        assert page.pagination.total == 0
        assert page.pagination.total_pages == 0


class TestListCustomersFilters:
    """Address filters on list_customers."""

    @pytest.fixture
    def customers(self, store, make_customer, make_address):
        boston = store.create_customer(
            make_customer(phone="3000000001", first="Bo"),
            [make_address(city="South Boston", state="MA", pin="021270")],
        )
        split = store.create_customer(
            make_customer(phone="3000000002", first="Sam"),
            [
                make_address(city="Boston", state="NY", pin="100001"),
                make_address(city="Springfield", state="MA", pin="011030"),
            ],
        )
        pune = store.create_customer(
            make_customer(phone="3000000003", first="Raj"),
            [make_address(city="Pune", state="MH", pin="411001")],
        )
        return {"boston": boston, "split": split, "pune": pune}

    def test_city_substring_case_insensitive(self, store, customers):
        page = store.list_customers(CustomerQuery(limit=10, city="boston"))

        assert {c.id for c in page.customers} == {customers["boston"].id, customers["split"].id}

    def test_all_filters_must_match_one_address(self, store, customers):
        page = store.list_customers(CustomerQuery(limit=10, city="Boston", state="MA"))

        assert [c.id for c in page.customers] == [customers["boston"].id]

    def test_pin_code_substring(self, store, customers):
        page = store.list_customers(CustomerQuery(limit=10, pin_code="4110"))

        assert [c.id for c in page.customers] == [customers["pune"].id]
        assert page.pagination.total == 1

    def test_wildcards_match_literally(self, store, customers):
        page = store.list_customers(CustomerQuery(limit=10, city="%"))

        assert page.customers == []

    def test_customer_listed_once_with_several_matches(self, store, make_customer, make_address):
        store.create_customer(
            make_customer(phone="3000000009"),
            [make_address(city="Boston"), make_address(city="Boston")],
        )

        page = store.list_customers(CustomerQuery(limit=10, city="Boston"))

        assert len(page.customers) == 1
        assert page.pagination.total == 1


class TestUpdateCustomer:
    """Tests for update_customer."""

    def test_updates_specified_fields(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address()])

        updated = store.update_customer(created.id, CustomerUpdate(last_name="Iyer"))

        assert updated.first_name == "Asha"  # Unchanged
        assert updated.last_name == "Iyer"
        assert updated.created_at == created.created_at

    def test_phone_taken_by_other_customer(self, store, make_customer, make_address):
        store.create_customer(make_customer(phone="4000000001"), [make_address()])
        second = store.create_customer(make_customer(phone="4000000002"), [make_address()])

        with pytest.raises(DuplicatePhoneError):
            store.update_customer(second.id, CustomerUpdate(phone_number="4000000001"))

        assert store.get_customer(second.id).phone_number == "4000000002"

    def test_own_phone_is_not_a_conflict(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(phone="4000000003"), [make_address()])

        updated = store.update_customer(
            created.id, CustomerUpdate(phone_number="4000000003", first_name="Asha K")
        )

        assert updated.first_name == "Asha K"

    def test_missing_raises(self, store):
        with pytest.raises(CustomerNotFoundError):
            store.update_customer(999, CustomerUpdate(first_name="Nobody"))

    def test_empty_update_returns_current(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address()])

        updated = store.update_customer(created.id, CustomerUpdate())

        assert updated.last_name == created.last_name


class TestDeleteCustomer:
    """Tests for delete_customer."""

    def test_cascades_to_addresses(self, store, make_customer, make_address):
        doomed = store.create_customer(
            make_customer(phone="5000000001"), [make_address(), make_address()]
        )
        kept = store.create_customer(make_customer(phone="5000000002"), [make_address()])

        store.delete_customer(doomed.id)

        with pytest.raises(CustomerNotFoundError):
            store.get_customer(doomed.id)
        assert store.list_addresses(doomed.id) == []
        for address in doomed.addresses:
            with pytest.raises(AddressNotFoundError):
                store.update_address(address.id, AddressUpdate(city="Ghost"))
        assert len(store.list_addresses(kept.id)) == 1

    def test_missing_raises(self, store):
        with pytest.raises(CustomerNotFoundError):
            store.delete_customer(999)


class TestAddAddress:
    """Tests for add_address."""

    def test_non_primary_keeps_existing_primary(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address()])

        added = store.add_address(created.id, make_address(city="Nashik"))

        assert added.is_primary is False
        addresses = store.list_addresses(created.id)
        assert primaries(addresses) == [created.addresses[0].id]

    def test_primary_clears_siblings(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(), make_address()])

        added = store.add_address(created.id, make_address(primary=True))

        assert added.is_primary is True
        assert primaries(store.list_addresses(created.id)) == [added.id]

    def test_unknown_customer_raises(self, store, make_address):
        with pytest.raises(CustomerNotFoundError):
            store.add_address(999, make_address())


class TestUpdateAddress:
    """Tests for update_address."""

    def test_updates_fields(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(city="Pune")])
        address_id = created.addresses[0].id

        updated = store.update_address(address_id, AddressUpdate(address_line="7 FC Road"))

        assert updated.address_line == "7 FC Road"
        assert updated.city == "Pune"  # Unchanged
        assert updated.is_primary is True  # Unchanged

    def test_setting_primary_clears_siblings(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(), make_address()])
        second = created.addresses[1]

        store.update_address(second.id, AddressUpdate(is_primary=True))

        assert primaries(store.list_addresses(created.id)) == [second.id]

    def test_unsetting_primary_leaves_none(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(), make_address()])
        first = created.addresses[0]

        store.update_address(first.id, AddressUpdate(is_primary=False))

        assert primaries(store.list_addresses(created.id)) == []

    def test_missing_raises(self, store):
        with pytest.raises(AddressNotFoundError):
            store.update_address(999, AddressUpdate(city="Nowhere"))


class TestDeleteAddress:
    """Tests for delete_address."""

    def test_last_address_rejected(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address()])
        only = created.addresses[0]

        with pytest.raises(LastAddressError):
            store.delete_address(only.id)

        assert [a.id for a in store.list_addresses(created.id)] == [only.id]

    def test_deletes_when_others_remain(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(), make_address()])

        store.delete_address(created.addresses[1].id)

        remaining = store.list_addresses(created.id)
        assert [a.id for a in remaining] == [created.addresses[0].id]

    def test_second_delete_hits_last_address_rule(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(), make_address()])

        store.delete_address(created.addresses[0].id)

        with pytest.raises(LastAddressError):
            store.delete_address(created.addresses[1].id)

    def test_missing_raises(self, store):
        with pytest.raises(AddressNotFoundError):
            store.delete_address(999)


class TestIsSingleAddress:
    """Tests for is_single_address."""

    def test_true_with_one(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address()])
        assert store.is_single_address(created.id) is True

    def test_false_with_two(self, store, make_customer, make_address):
        created = store.create_customer(make_customer(), [make_address(), make_address()])
        assert store.is_single_address(created.id) is False

    def test_false_for_unknown_customer(self, store):
        assert store.is_single_address(999) is False


class TestPing:

    def test_reachable(self, store):
        assert store.ping() is True
