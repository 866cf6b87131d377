from elderly_mode.rules.views import RuleDocument

# Hand-tuned rules for sites where the generic defaults are not enough
BUILT_IN_RULES: dict[str, RuleDocument] = {
	'amazon-com': RuleDocument(
		remove_selectors=[
			# navigation
			'#nav-ad-container',
			'#nav-flyout-searchAjax',
			'#nav-subnav',
			'#nav-progressive-subnav',
			# ads and promotions
			'.a-carousel-card[data-a-card-type="ad"]',
			'[data-component-type="sp-sponsored-result"]',
			'[class*="sponsored"]',
			'[class*="Sponsored"]',
			'[id*="sponsored"]',
			'.AdHolder',
			'.sp_desktop_sponsored_label',
			'#percolate-ui-ilm_div',
			'.celwidget[cel_widget_id*="ad"]',
			'#rhf',
			'#dp-ads-center-promo',
			'#sims-consolidated-1',
			'#sims-consolidated-2',
			'#desktop-banner',
			'#mobile-banner',
			# membership upsell
			'#nav-flyout-prime',
			'#nav-flyout-amazonprime',
			# hero videos and carousels
			'#desktop-tall-hero-video_desktop-gateway-atf_0',
			'._desktop-tall-hero-video_style_lazy-video-wrapper__WM56t',
			'[class*="hero-video"]',
			'[class*="tall-hero"]',
			'.gw-desktop-herotator',
			'#gw-desktop-herotator',
			# shopping assistant
			'[id*="rufus"]',
			'[class*="rufus"]',
			# other distractions
			'.nav-sprite-v1',
			'#nav-sprite-v1',
			'.nav-timeline-prime-icon',
			'[data-cel-widget*="marketing"]',
			'[class*="marketing"]',
			'[class*="promo"]',
			'.a-popover',
			'.a-declarative[data-action*="popup"]',
		],
		keep_selectors=[
			'input',
			'button',
			'select',
			'textarea',
			'#twotabsearchtextbox',
			'#nav-search-submit-button',
			'#nav-cart',
			'#nav-cart-count',
			'#nav-orders',
			'#nav-link-accountList',
			'#nav-global-location-popover-link',
			'#searchDropdownBox',
			'#productTitle',
			'#priceblock_ourprice',
			'#priceblock_dealprice',
			'.product-image',
			'#feature-bullets',
			'#productDescription',
			'.a-price',
			'.a-button-primary',
			'#add-to-cart-button',
			'#buy-now-button',
			'h1',
			'h2',
			'h3',
			'article',
			'main',
			'.a-link-normal',
			'.a-cardui',
			'[data-component-type="s-search-result"]',
			'.s-result-item',
			'.gw-card-layout',
		],
	),
	'cnn-com': RuleDocument(
		remove_selectors=[
			'.ad',
			'.ad-wrapper',
			'.banner-ad',
			'[class*="advertisement"]',
			'.video-ad',
			'#header-nav-container',
			'.related-content',
			'.zn-body__rail',
			'[data-ad-type]',
			'.el__embedded--standard',
			'.ad-slot-wrap',
		],
		keep_selectors=['article', '.headline', '.paragraph', 'h1', 'h2', 'img', 'video', 'button', 'input', 'select'],
	),
}
