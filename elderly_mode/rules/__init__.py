from elderly_mode.rules.service import RuleCache, RulesService, normalize_site_identifier
from elderly_mode.rules.views import RuleDocument

__all__ = ['RuleCache', 'RuleDocument', 'RulesService', 'normalize_site_identifier']
