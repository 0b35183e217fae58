"""OpenID Extension modules."""

from openid_message.extensions.ax import AXMessageFactory
from openid_message.extensions.sreg import SReg10Factory, SRegFactory

__all__ = ['ax', 'sreg', 'BUILTIN_FACTORIES']

# Factories every default registry starts with
BUILTIN_FACTORIES = (AXMessageFactory, SRegFactory, SReg10Factory)
