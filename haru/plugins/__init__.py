from haru.plugins.backbone import BackbonePlugin
from haru.plugins.barrel import BarrelPlugin
from haru.plugins.client import ClientPlugin

__all__ = ['DEFAULT_PLUGINS', 'BackbonePlugin', 'BarrelPlugin', 'ClientPlugin']

DEFAULT_PLUGINS = (
    'haru.plugins.backbone:BackbonePlugin',
    'haru.plugins.client:ClientPlugin',
    'haru.plugins.barrel:BarrelPlugin',
)
