"""
Action-area materialization: proxy mirrors, clone mode, markers and teardown.

Poll-based original→mirror sync needs a running loop, so these tests are async.
"""

import asyncio

import pytest

from elderly_mode.blocks.identifiers import form_metadata
from elderly_mode.blocks.views import Block, BlockKind, ZoneAssignment
from elderly_mode.config import SyncMode
from elderly_mode.dom.interactive import PROXY_CLASS
from elderly_mode.dom.views import MARKER_ATTRIBUTE
from elderly_mode.layout.materializer import ZoneMaterializer
from elderly_mode.layout.proxy import PROXY_ATTRIBUTE
from elderly_mode.layout.styles import ACTION_AREA_ID, ACTION_ITEM_CLASS, ACTION_SECTION_CLASS, ORIGINAL_CLASS, PLACEHOLDER_CLASS

ORDER_PAGE = """
<html><body>
	<form id="order" action="/order">
		<label for="name">Name</label>
		<input id="name" name="name" tabindex="3">
		<input id="gift" type="checkbox" name="gift">
		<select id="size" name="size">
			<option value="s">Small</option>
			<option value="m">Medium</option>
		</select>
		<button id="send" type="submit">Send</button>
	</form>
</body></html>
"""

RADIO_PAGE = """
<html><body>
	<div id="choices" class="form-row">
		<input id="a" type="radio" name="size" value="s">
		<input id="b" type="radio" name="size" value="m" checked>
	</div>
</body></html>
"""

NESTED_PAGE = """
<html><body>
	<nav id="menu">
		<a href="/home">Home</a>
		<div id="finder" class="search-box"><input type="search" name="q"><button type="button">Go</button></div>
	</nav>
</body></html>
"""


@pytest.fixture
def page(make_page):
	return make_page(ORDER_PAGE)


@pytest.fixture
async def materializer(page, settings):
	materializer = ZoneMaterializer(page, settings)
	yield materializer
	materializer.teardown()


def form_zone(page) -> ZoneAssignment:
	form = page.get_element_by_id('order')
	return ZoneAssignment(action_zone=[Block.create(form, BlockKind.FORM, form_metadata(form))])


def binding_for(materializer, page, element_id: str):
	return materializer.registry.for_original(page.get_element_by_id(element_id))


def choices_zone(page) -> ZoneAssignment:
	choices = page.get_element_by_id('choices')
	return ZoneAssignment(action_zone=[Block.create(choices, BlockKind.FORM, form_metadata(choices))])


@pytest.fixture(params=[SyncMode.PROXY, SyncMode.CLONE], ids=['proxy', 'clone'])
async def radio_materializer(request, make_page, settings):
	materializer = ZoneMaterializer(make_page(RADIO_PAGE), settings.model_copy(update={'sync_mode': request.param}))
	yield materializer
	materializer.teardown()


class TestRadioGroupOutsideAForm:
	async def test_activation_keeps_the_checked_radio(self, radio_materializer):
		page = radio_materializer.page
		radio_materializer.materialize(choices_zone(page))

		assert page.get_element_by_id('b').checked is True
		assert page.get_element_by_id('a').checked is False
		assert binding_for(radio_materializer, page, 'b').mirror.checked is True
		assert page.form_data(page.get_element_by_id('choices')) == {'size': 'm'}

	async def test_clicking_a_mirror_selects_its_original(self, radio_materializer):
		page = radio_materializer.page
		radio_materializer.materialize(choices_zone(page))
		a = binding_for(radio_materializer, page, 'a')
		b = binding_for(radio_materializer, page, 'b')

		a.mirror.click()
		await asyncio.sleep(0.05)

		assert a.original.checked is True
		assert a.mirror.checked is True
		assert b.original.checked is False
		assert b.mirror.checked is False


class TestProxyMode:
	async def test_every_control_gets_a_mirror_in_the_action_area(self, page, materializer):
		bindings = materializer.materialize(form_zone(page))

		assert [binding.index for binding in bindings] == [1, 2, 3, 4]
		area = page.get_element_by_id(ACTION_AREA_ID)
		assert area is not None and area.parent is page.body
		for binding in bindings:
			assert area.contains(binding.mirror)
			assert binding.mirror.has_class(PROXY_CLASS)
			assert binding.mirror.get_attribute(PROXY_ATTRIBUTE) == str(binding.index)
			assert binding.item.has_class(ACTION_ITEM_CLASS)
			assert binding.item.get_attribute('data-original-element-id') == f'elderly-ref-{binding.index}'

		label = binding_for(materializer, page, 'name').item.query('label')
		assert label.text_content == 'Name'
		assert label.get_attribute('for') == 'elderly-proxy-1'

	async def test_originals_stay_in_place_marked_and_suppressed(self, page, materializer):
		materializer.materialize(form_zone(page))

		name = page.get_element_by_id('name')
		assert name.parent is page.get_element_by_id('order')
		assert name.get_attribute(MARKER_ATTRIBUTE) == 'elderly-ref-1'
		assert name.has_class(ORIGINAL_CLASS)
		assert name.get_attribute('aria-hidden') == 'true'
		assert name.get_attribute('tabindex') == '-1'

	async def test_typing_in_the_mirror_reaches_the_original(self, page, materializer):
		materializer.materialize(form_zone(page))
		original = page.get_element_by_id('name')
		targets = []
		original.add_event_listener('input', lambda event: targets.append(event.target))
		original.add_event_listener('change', lambda event: targets.append(event.target))

		page.type_text(binding_for(materializer, page, 'name').mirror, 'Ada')

		assert original.value == 'Ada'
		assert targets == [original, original]

	async def test_original_changes_are_polled_into_the_mirror(self, page, materializer):
		materializer.materialize(form_zone(page))
		binding = binding_for(materializer, page, 'name')

		page.get_element_by_id('name').value = 'set by a script'
		await asyncio.sleep(0.05)

		assert binding.mirror.value == 'set by a script'

	async def test_checkbox_and_select_mirrors(self, page, materializer):
		materializer.materialize(form_zone(page))
		gift = binding_for(materializer, page, 'gift')
		size = binding_for(materializer, page, 'size')

		gift.mirror.click()
		page.select_option(size.mirror, 'm')

		assert page.get_element_by_id('gift').checked is True
		assert page.get_element_by_id('size').value == 'm'
		assert [option.get_attribute('value') for option in page.options(size.mirror)] == ['s', 'm']

	async def test_mirror_button_submits_the_original_form(self, page, materializer):
		materializer.materialize(form_zone(page))
		page.type_text(binding_for(materializer, page, 'name').mirror, 'Ada')

		binding_for(materializer, page, 'send').mirror.click()

		assert len(page.submissions) == 1
		assert page.submissions[0].form is page.get_element_by_id('order')
		assert page.submissions[0].data == {'name': 'Ada', 'size': 's'}

	async def test_marked_nodes_are_never_bound_twice(self, page, materializer):
		name = page.get_element_by_id('name')
		first = materializer.materialize_nodes([name])
		second = materializer.materialize_nodes([name])

		assert len(first) == 1
		assert second == []
		assert len(materializer.registry) == 1

	async def test_indices_continue_after_existing_markers(self, page, materializer):
		materializer.materialize_nodes([page.get_element_by_id('name')])
		bindings = materializer.materialize_nodes([page.get_element_by_id('send')])
		assert bindings[0].index == 2
		assert materializer.next_index() == 3

	async def test_placeholder_when_nothing_was_mirrored(self, page, materializer):
		materializer.materialize(ZoneAssignment())
		area = page.get_element_by_id(ACTION_AREA_ID)
		assert area.query(f'.{PLACEHOLDER_CLASS}') is not None

		materializer.materialize_nodes([page.get_element_by_id('send')])
		assert area.query(f'.{PLACEHOLDER_CLASS}') is None

	async def test_polling_stops_when_the_original_is_removed(self, page, materializer):
		materializer.materialize(form_zone(page))
		binding = binding_for(materializer, page, 'name')
		assert binding.poll_task is not None

		page.remove_node(page.get_element_by_id('name'))
		await asyncio.sleep(0.05)

		assert binding.poll_task.done()

	async def test_teardown_restores_every_original(self, page, materializer):
		bindings = materializer.materialize(form_zone(page))
		mirrors = [binding.mirror for binding in bindings]

		assert materializer.teardown() == 4

		name = page.get_element_by_id('name')
		assert name.get_attribute('tabindex') == '3'
		assert not name.has_attribute('aria-hidden')
		assert not name.has_attribute(MARKER_ATTRIBUTE)
		assert not name.has_class(ORIGINAL_CLASS)
		assert page.get_element_by_id(ACTION_AREA_ID) is None
		assert len(materializer.registry) == 0
		assert all(page.listener_count(mirror, 'input') == 0 for mirror in mirrors)
		assert all(binding.poll_task is None for binding in bindings)


class TestCloneMode:
	@pytest.fixture
	async def materializer(self, page, settings):
		materializer = ZoneMaterializer(page, settings.model_copy(update={'sync_mode': SyncMode.CLONE}))
		yield materializer
		materializer.teardown()

	async def test_clone_ids_are_prefixed(self, page, materializer):
		materializer.materialize(form_zone(page))

		clone = page.get_element_by_id('elderly-clone-order')
		assert clone is not None
		assert page.get_element_by_id(ACTION_AREA_ID).contains(clone)
		assert clone.query('label').get_attribute('for') == 'elderly-clone-name'
		assert len(page.query_selector_all('#name')) == 1

	async def test_copies_forward_values_and_clicks(self, page, materializer):
		bindings = materializer.materialize(form_zone(page))
		assert [binding.original.id for binding in bindings] == ['name', 'gift', 'size', 'send']

		page.type_text(page.get_element_by_id('elderly-clone-name'), 'Grace')
		page.get_element_by_id('elderly-clone-send').click()

		assert page.get_element_by_id('name').value == 'Grace'
		assert len(page.submissions) == 1
		assert page.submissions[0].form is page.get_element_by_id('order')

	async def test_block_root_is_suppressed_and_restored(self, page, materializer):
		materializer.materialize(form_zone(page))
		form = page.get_element_by_id('order')
		assert form.has_class(ORIGINAL_CLASS)

		materializer.teardown()
		assert not form.has_class(ORIGINAL_CLASS)
		assert page.get_element_by_id('elderly-clone-order') is None

	async def test_block_inside_a_cloned_block_is_not_cloned_again(self, make_page, settings):
		page = make_page(NESTED_PAGE)
		materializer = ZoneMaterializer(page, settings.model_copy(update={'sync_mode': SyncMode.CLONE}))
		zones = ZoneAssignment(
			action_zone=[
				Block.create(page.get_element_by_id('menu'), BlockKind.NAVIGATION),
				Block.create(page.get_element_by_id('finder'), BlockKind.SEARCH),
			]
		)

		bindings = materializer.materialize(zones)

		area = page.get_element_by_id(ACTION_AREA_ID)
		assert len(bindings) == 3
		assert len(area.query_all(f'.{ACTION_SECTION_CLASS}')) == 1
		assert len(page.query_selector_all('#elderly-clone-finder')) == 1

		materializer.teardown()
		assert len(materializer.materialize(zones)) == 3
		materializer.teardown()
