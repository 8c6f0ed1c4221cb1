"""Publishing policy: which publications reach the artifact host, and when releases happen."""

from extpub.publish.gate import ProjectPublishGate
from extpub.publish.plugins import ExternalPublishCustomPlugin, ExternalPublishJarPlugin
from extpub.publish.policy import ReleaseOverridePolicy
from extpub.publish.root import RootPublishCoordinator
from extpub.publish.signing_key import SigningCredential

__all__ = [
    "ExternalPublishCustomPlugin",
    "ExternalPublishJarPlugin",
    "ProjectPublishGate",
    "ReleaseOverridePolicy",
    "RootPublishCoordinator",
    "SigningCredential",
]
