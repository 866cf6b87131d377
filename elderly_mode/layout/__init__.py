from elderly_mode.layout.labels import get_element_label
from elderly_mode.layout.materializer import ZoneMaterializer
from elderly_mode.layout.proxy import ProxyElementFactory
from elderly_mode.layout.strategy import LayoutStrategy, decide_layout_strategy
from elderly_mode.layout.styles import StyleDirective, apply_directive, enlarge_text, remove_directive
from elderly_mode.layout.views import BindingRegistry, ProxyBinding

__all__ = [
	'BindingRegistry',
	'LayoutStrategy',
	'ProxyBinding',
	'ProxyElementFactory',
	'StyleDirective',
	'ZoneMaterializer',
	'apply_directive',
	'decide_layout_strategy',
	'enlarge_text',
	'get_element_label',
	'remove_directive',
]
