"""
tests/test_catalog.py – CatalogStore: create coercion, search, pagination.
"""
import pytest

from surplus.core.catalog import CatalogStore
from surplus.core.errors import NotFound, StoreUnavailable, ValidationError
from surplus.models import ListingCreate


@pytest.fixture
def catalog(db) -> CatalogStore:
    return CatalogStore(db)


class TestCreate:

    @pytest.mark.asyncio
    async def test_fields_persisted(self, catalog, restaurant_id):
        item = await catalog.create(restaurant_id, ListingCreate(
            title="Veg Box", description="Rice & dal", price=30, quantity_available=5, image_url="/media/x.png",
        ))
        fetched = await catalog.get(item.id)
        assert fetched.title == "Veg Box"
        assert fetched.price == 30
        assert fetched.quantity_available == 5
        assert fetched.restaurant_id == restaurant_id
        assert fetched.image_url == "/media/x.png"

    @pytest.mark.asyncio
    async def test_missing_title_rejected(self, catalog, restaurant_id):
        with pytest.raises(ValidationError, match="Title is required"):
            await catalog.create(restaurant_id, ListingCreate(title="   ", price=1))

    @pytest.mark.asyncio
    async def test_non_numeric_coerced_to_zero(self, catalog, restaurant_id):
        item = await catalog.create(restaurant_id, ListingCreate(title="Bread", price="abc", quantity_available=None))
        assert item.price == 0
        assert item.quantity_available == 0
        assert item.description == ""

    @pytest.mark.asyncio
    async def test_numeric_strings_accepted(self, catalog, restaurant_id):
        item = await catalog.create(restaurant_id, ListingCreate(title="Bread", price="20.5", quantity_available="8"))
        assert item.price == 20.5
        assert item.quantity_available == 8

    @pytest.mark.parametrize("price,quantity", [(-1, 1), (1, -3), (1, "2.5")])
    @pytest.mark.asyncio
    async def test_invalid_numbers_rejected(self, catalog, restaurant_id, price, quantity):
        with pytest.raises(ValidationError):
            await catalog.create(restaurant_id, ListingCreate(title="Bad", price=price, quantity_available=quantity))


class TestSearch:

    @pytest.mark.asyncio
    async def test_pagination_meta(self, catalog, restaurant_id):
        for i in range(25):
            await catalog.create(restaurant_id, ListingCreate(title=f"Item {i + 1:02d}", quantity_available=1))
        everything = await catalog.search(limit=100)
        page2 = await catalog.search(page=2, limit=10)
        assert page2.meta.total == 25
        assert page2.meta.pages == 3
        assert page2.meta.page == 2
        assert [i.id for i in page2.data] == [i.id for i in everything.data[10:20]]
        page3 = await catalog.search(page=3, limit=10)
        assert len(page3.data) == 5

    @pytest.mark.asyncio
    async def test_newest_first(self, catalog, restaurant_id):
        old = await catalog.create(restaurant_id, ListingCreate(title="Old"))
        new = await catalog.create(restaurant_id, ListingCreate(title="New"))
        result = await catalog.search()
        assert [i.id for i in result.data] == [new.id, old.id]

    @pytest.mark.asyncio
    async def test_case_insensitive_title_or_description(self, catalog, restaurant_id):
        await catalog.create(restaurant_id, ListingCreate(title="Veg Meal Box", description="Rice & veg"))
        await catalog.create(restaurant_id, ListingCreate(title="Bread Pack", description="Sandwiches"))
        assert [i.title for i in (await catalog.search("meal")).data] == ["Veg Meal Box"]
        assert [i.title for i in (await catalog.search("SANDWICH")).data] == ["Bread Pack"]
        assert (await catalog.search("pizza")).meta.total == 0

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, catalog, restaurant_id):
        await catalog.create(restaurant_id, ListingCreate(title="100% fresh"))
        await catalog.create(restaurant_id, ListingCreate(title="Fresh rolls"))
        result = await catalog.search("0%")
        assert [i.title for i in result.data] == ["100% fresh"]

    @pytest.mark.parametrize("page,limit,expected_page,expected_limit", [
        (0, 12, 1, 12),
        (-4, 0, 1, 1),
        (1, 500, 1, 100),
    ])
    @pytest.mark.asyncio
    async def test_clamping(self, catalog, page, limit, expected_page, expected_limit):
        result = await catalog.search(page=page, limit=limit)
        assert result.meta.page == expected_page
        assert result.meta.limit == expected_limit
        assert result.meta.pages == 0

    @pytest.mark.asyncio
    async def test_web_max_limit(self, catalog):
        result = await catalog.search(limit=50, max_limit=24)
        assert result.meta.limit == 24


class TestGet:

    @pytest.mark.asyncio
    async def test_malformed_id(self, catalog):
        with pytest.raises(ValidationError):
            await catalog.get("mine")

    @pytest.mark.asyncio
    async def test_unknown_id(self, catalog):
        with pytest.raises(NotFound):
            await catalog.get("0" * 32)

    @pytest.mark.asyncio
    async def test_list_for_restaurant(self, db, catalog, restaurant_id):
        from conftest import make_user
        other = make_user(db, "restaurant")
        mine = await catalog.create(restaurant_id, ListingCreate(title="Mine"))
        await catalog.create(other, ListingCreate(title="Theirs"))
        assert [i.id for i in await catalog.list_for_restaurant(restaurant_id)] == [mine.id]


class TestStoreUnavailable:

    @pytest.mark.asyncio
    async def test_search_and_get(self):
        from conftest import BrokenDatabase
        catalog = CatalogStore(BrokenDatabase())
        with pytest.raises(StoreUnavailable):
            await catalog.search("veg")
        with pytest.raises(StoreUnavailable):
            await catalog.get("0" * 32)

    def test_validate_does_not_touch_store(self):
        from conftest import BrokenDatabase
        catalog = CatalogStore(BrokenDatabase())
        catalog.validate(ListingCreate(title="Soup", quantity_available=3))
        with pytest.raises(ValidationError, match="Title is required"):
            catalog.validate(ListingCreate(title=None))
        with pytest.raises(ValidationError, match="whole number"):
            catalog.validate(ListingCreate(title="Soup", quantity_available=2.5))
