"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed declcfg package.
"""

import pytest


ETCD_PACKAGE = '{"schema":"olm.package","name":"etcd","defaultChannel":"alpha","description":"etcd operator"}'
ETCD_CHANNEL = (
    '{"schema":"olm.channel","name":"alpha","package":"etcd","entries":['
    '{"name":"etcdoperator.v0.9.0"},'
    '{"name":"etcdoperator.v0.9.2","replaces":"etcdoperator.v0.9.0","skipRange":"<0.9.2"}]}'
)
ETCD_BUNDLE = (
    '{"schema":"olm.bundle","name":"etcdoperator.v0.9.2","package":"etcd",'
    '"image":"quay.io/operatorhubio/etcd:v0.9.2",'
    '"properties":[{"type":"olm.package","value":{"packageName":"etcd","version":"0.9.2"}}],'
    '"relatedImages":[{"name":"operator","image":"quay.io/coreos/etcd-operator@sha256:c0301e4686c3ed4206e370b42de5a3bd2229b9fb4906cf85f3f30650424abec2"}]}'
)
DEPRECATIONS = '{"schema":"olm.deprecations","package":"etcd","entries":[{"reference":{"schema":"olm.bundle","name":"etcdoperator.v0.9.0"},"message":"use v0.9.2"}]}'


@pytest.fixture
def etcd_stream():
    """A small catalog: one document of each kind, newline separated."""
    return "\n".join([ETCD_PACKAGE, ETCD_CHANNEL, ETCD_BUNDLE, DEPRECATIONS]) + "\n"
