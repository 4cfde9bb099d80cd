import threading

from storefront.adapters.mock_catalogue import CatalogueUnavailable
from storefront.services.product_store import (
    FETCH_ERROR_MESSAGE,
    UPDATE_ERROR_MESSAGE,
    FetchError,
    ProductStore,
    UpdateError,
)


def _ids(products):
    return [p.id for p in products]


def test_refresh_replaces_list_and_notifies_once(fake_catalogue):
    store = ProductStore(fake_catalogue)
    received = []
    store.subscribe(received.append)

    assert store.refresh() is True
    assert _ids(store.products) == ["1", "2", "3", "4"]
    assert len(received) == 1
    assert _ids(received[0]) == ["1", "2", "3", "4"]
    assert store.version == 1
    assert store.last_refresh is not None
    assert store.is_loading is False
    assert store.error is None


def test_failed_refresh_keeps_previous_list(fake_catalogue):
    store = ProductStore(fake_catalogue)
    received = []
    store.subscribe(received.append)
    store.refresh()
    first_refresh = store.last_refresh

    fake_catalogue.fail_fetch = True
    assert store.refresh() is False
    assert _ids(store.products) == ["1", "2", "3", "4"]
    assert store.error == FETCH_ERROR_MESSAGE
    assert isinstance(store.last_failure, FetchError)
    assert store.last_refresh == first_refresh
    assert store.version == 1
    assert store.is_loading is False
    assert len(received) == 1


def test_corrupt_snapshot_is_a_fetch_error(fake_catalogue):
    store = ProductStore(fake_catalogue)
    fake_catalogue.corrupt_fetch = True
    assert store.refresh() is False
    assert store.products == []
    assert isinstance(store.last_failure, FetchError)


def test_next_successful_refresh_clears_error(fake_catalogue):
    store = ProductStore(fake_catalogue)
    fake_catalogue.fail_fetch = True
    store.refresh()
    fake_catalogue.fail_fetch = False
    assert store.refresh() is True
    assert store.error is None
    assert store.last_failure is None


def test_subscriber_failure_does_not_stop_others(fake_catalogue):
    store = ProductStore(fake_catalogue)
    received = []

    def broken(products):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(received.append)
    assert store.refresh() is True
    assert len(received) == 1


def test_unsubscribe(fake_catalogue):
    store = ProductStore(fake_catalogue)
    received = []
    unsubscribe = store.subscribe(received.append)
    store.refresh()
    unsubscribe()
    store.refresh()
    assert len(received) == 1
    assert store.version == 2


def test_pin_calls_catalogue_then_refreshes(fake_catalogue):
    store = ProductStore(fake_catalogue)
    store.refresh()
    fetches = fake_catalogue.fetch_count

    assert store.pin("1", actor="admin@skinseoul.com") is True
    assert fake_catalogue.pin_calls == [("1", True, "admin@skinseoul.com")]
    assert fake_catalogue.fetch_count == fetches + 1
    assert store.get("1").is_pinned is True

    assert store.unpin("1") is True
    assert store.get("1").is_pinned is False


def test_failed_pin_leaves_state_unchanged(fake_catalogue):
    store = ProductStore(fake_catalogue)
    received = []
    store.subscribe(received.append)
    store.refresh()
    before = store.products
    fetches = fake_catalogue.fetch_count

    fake_catalogue.fail_update = True
    assert store.pin("1") is False
    assert store.products == before
    assert store.get("1").is_pinned is False
    assert store.error == UPDATE_ERROR_MESSAGE
    assert isinstance(store.last_failure, UpdateError)
    assert fake_catalogue.fetch_count == fetches
    assert len(received) == 1


def test_pin_unknown_product_is_not_found(fake_catalogue):
    store = ProductStore(fake_catalogue)
    store.refresh()
    assert store.pin("missing") is False
    assert store.last_failure.not_found is True


def test_source_of_truth_wins_over_optimistic_pin(fake_catalogue):
    # upstream accepts the pin but the following fetch still has the old flag
    store = ProductStore(fake_catalogue)
    store.refresh()
    fake_catalogue.stale_fetch = True

    assert store.pin("2") is True
    assert store.get("2").is_pinned is False


def test_optimistic_pin_survives_failed_follow_up_refresh(fake_catalogue):
    store = ProductStore(fake_catalogue)
    store.refresh()

    fake_catalogue.stale_fetch = True
    fake_catalogue.fail_fetch = True
    assert store.pin("2") is True
    assert store.get("2").is_pinned is True
    assert store.error == FETCH_ERROR_MESSAGE

    fake_catalogue.fail_fetch = False
    store.refresh()
    assert store.get("2").is_pinned is False


def test_toggle_pin(fake_catalogue):
    store = ProductStore(fake_catalogue)
    store.refresh()
    assert store.get("3").is_pinned is True

    assert store.toggle_pin("3") is True
    assert store.get("3").is_pinned is False
    assert store.toggle_pin("3") is True
    assert store.get("3").is_pinned is True


def test_toggle_unknown_product(fake_catalogue):
    store = ProductStore(fake_catalogue)
    store.refresh()
    assert store.toggle_pin("nope") is False
    assert store.error == UPDATE_ERROR_MESSAGE
    assert store.last_failure.not_found is True
    assert fake_catalogue.pin_calls == []


def test_state_snapshot(fake_catalogue):
    store = ProductStore(fake_catalogue)
    store.refresh()
    state = store.state()
    assert _ids(state.products) == ["1", "2", "3", "4"]
    assert state.version == 1
    assert state.error is None
    assert state.is_loading is False


def test_duplicate_ids_are_a_fetch_error(fake_catalogue, make_product):
    store = ProductStore(fake_catalogue)
    received = []
    store.subscribe(received.append)
    store.refresh()

    fake_catalogue.products.append(make_product("1", price=99))
    assert store.refresh() is False
    assert isinstance(store.last_failure, FetchError)
    assert store.error == FETCH_ERROR_MESSAGE
    assert _ids(store.products) == ["1", "2", "3", "4"]
    assert store.version == 1
    assert len(received) == 1


class _SlowThenDownCatalogue:
    """First fetch blocks until released; every later fetch fails."""

    def __init__(self, products):
        self.products = products
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def fetch_products(self):
        self.calls += 1
        if self.calls == 1:
            self.started.set()
            self.release.wait(timeout=5)
            return list(self.products)
        raise CatalogueUnavailable("catalogue down")


def test_late_success_clears_error_from_overlapping_failure(sample_products):
    catalogue = _SlowThenDownCatalogue(sample_products)
    store = ProductStore(catalogue)
    results = []
    slow = threading.Thread(target=lambda: results.append(store.refresh()))
    slow.start()
    assert catalogue.started.wait(timeout=5)

    assert store.refresh() is False
    assert store.error == FETCH_ERROR_MESSAGE

    catalogue.release.set()
    slow.join(timeout=5)
    assert results == [True]
    assert _ids(store.products) == ["1", "2", "3", "4"]
    assert store.error is None
    assert store.last_failure is None
    assert store.is_loading is False
    assert store.version == 1
