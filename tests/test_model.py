"""Tests for catalog entity models: wire shape and equality."""

import pytest

from declcfg.kernel.meta import Meta
from declcfg.kernel.model import (
    Bundle,
    Channel,
    ChannelEntry,
    DeclarativeConfig,
    Icon,
    Package,
    Property,
    RelatedImage,
)


def _wire(entity):
    return entity.model_dump(mode="json", by_alias=True)


class TestWireShape:
    """Tests for serialized field names and empty-field omission."""

    def test_package_omits_empty_optionals(self):
        pkg = Package(name="etcd", default_channel="alpha")
        assert _wire(pkg) == {"schema": "olm.package", "name": "etcd", "defaultChannel": "alpha"}

    def test_package_with_icon_and_properties(self):
        pkg = Package(
            name="etcd",
            default_channel="alpha",
            icon=Icon(data=b"<svg/>", media_type="image/svg+xml"),
            description="etcd operator",
            properties=[Property(type="olm.maxOpenShiftVersion", value="4.12")],
        )
        assert _wire(pkg) == {
            "schema": "olm.package",
            "name": "etcd",
            "defaultChannel": "alpha",
            "icon": {"base64data": "PHN2Zy8+", "mediatype": "image/svg+xml"},
            "description": "etcd operator",
            "properties": [{"type": "olm.maxOpenShiftVersion", "value": "4.12"}],
        }

    def test_channel_always_writes_entries(self):
        assert _wire(Channel(name="alpha", package="etcd")) == {
            "schema": "olm.channel",
            "name": "alpha",
            "package": "etcd",
            "entries": [],
        }

    def test_channel_entry_omits_empty_fields(self):
        entry = ChannelEntry(name="b", replaces="a", skip_range="<1.0.0")
        assert _wire(entry) == {"name": "b", "replaces": "a", "skipRange": "<1.0.0"}
        assert _wire(ChannelEntry(name="a")) == {"name": "a"}

    def test_bundle_legacy_fields_never_serialized(self):
        bundle = Bundle(
            name="etcdoperator.v0.9.2",
            package="etcd",
            image="quay.io/etcd:v0.9.2",
            related_images=[RelatedImage(name="operator", image="quay.io/etcd-operator:v0.9.2")],
            csv_json='{"kind":"ClusterServiceVersion"}',
            objects=['{"kind":"ClusterServiceVersion"}'],
        )
        data = _wire(bundle)
        assert data == {
            "schema": "olm.bundle",
            "name": "etcdoperator.v0.9.2",
            "package": "etcd",
            "image": "quay.io/etcd:v0.9.2",
            "relatedImages": [{"name": "operator", "image": "quay.io/etcd-operator:v0.9.2"}],
        }

    def test_icon_accepts_base64_text(self):
        icon = Icon.model_validate({"base64data": "PHN2Zy8+", "mediatype": "image/svg+xml"})
        assert icon.data == b"<svg/>"
        assert icon.media_type == "image/svg+xml"

    def test_icon_rejects_invalid_base64(self):
        with pytest.raises(ValueError, match="base64"):
            Icon.model_validate({"base64data": "not base64!"})


class TestWireDecoding:
    """Tests for validation with the wire context."""

    def test_keys_match_case_insensitively(self):
        pkg = Package.model_validate(
            {"Schema": "olm.package", "NAME": "etcd", "defaultchannel": "alpha"},
            context={"wire": True},
        )
        assert pkg.name == "etcd"
        assert pkg.default_channel == "alpha"

    def test_exact_spelling_wins(self):
        entry = ChannelEntry.model_validate({"Name": "variant", "name": "exact"}, context={"wire": True})
        assert entry.name == "exact"
        entry = ChannelEntry.model_validate({"name": "exact", "NAME": "variant"}, context={"wire": True})
        assert entry.name == "exact"

    def test_legacy_fields_ignored_on_wire(self):
        bundle = Bundle.model_validate(
            {"schema": "olm.bundle", "name": "b", "csv_json": "{}", "objects": ["{}"]},
            context={"wire": True},
        )
        assert bundle.csv_json == ""
        assert bundle.objects == []

    def test_nested_models_fold_keys(self):
        channel = Channel.model_validate(
            {"schema": "olm.channel", "name": "alpha", "Entries": [{"Name": "a", "SkipRange": "<1"}]},
            context={"wire": True},
        )
        assert channel.entries == [ChannelEntry(name="a", skip_range="<1")]


class TestEquality:
    """Tests for set-semantics equality."""

    def _bundle(self, **kwargs):
        fields = dict(
            name="etcdoperator.v0.9.2",
            package="etcd",
            image="quay.io/etcd:v0.9.2",
            properties=[
                Property(type="olm.package", value={"packageName": "etcd", "version": "0.9.2"}),
                Property(type="olm.gvk", value={"group": "etcd.database.coreos.com", "kind": "EtcdCluster", "version": "v1beta2"}),
            ],
            related_images=[
                RelatedImage(name="operator", image="quay.io/etcd-operator:v0.9.2"),
                RelatedImage(name="", image="quay.io/etcd:v3.4"),
            ],
        )
        fields.update(kwargs)
        return Bundle(**fields)

    def test_property_order_ignored(self):
        a = self._bundle()
        b = self._bundle(properties=list(reversed(a.properties)), related_images=list(reversed(a.related_images)))
        assert a == b

    def test_property_value_key_order_ignored(self):
        a = self._bundle(properties=[Property(type="t", value={"x": 1, "y": 2})])
        b = self._bundle(properties=[Property(type="t", value={"y": 2, "x": 1})])
        assert a == b

    def test_property_content_compared(self):
        a = self._bundle()
        b = self._bundle(properties=a.properties[:1])
        assert a != b

    def test_plain_field_compared(self):
        assert self._bundle() != self._bundle(image="quay.io/etcd:v0.9.3")

    def test_excluded_fields_compared(self):
        assert self._bundle(csv_json="{}") != self._bundle(csv_json="")
        assert self._bundle(objects=["a"]) != self._bundle(objects=["b"])
        assert self._bundle(objects=["a"]) == self._bundle(objects=["a"])

    def test_channel_entry_order_is_significant(self):
        entries = [ChannelEntry(name="a"), ChannelEntry(name="b", replaces="a")]
        a = Channel(name="alpha", package="etcd", entries=entries)
        b = Channel(name="alpha", package="etcd", entries=list(reversed(entries)))
        assert a != b

    def test_channel_properties_are_a_set(self):
        props = [Property(type="a", value=1), Property(type="b", value=2)]
        a = Channel(name="alpha", package="etcd", properties=props)
        b = Channel(name="alpha", package="etcd", properties=list(reversed(props)))
        assert a == b

    def test_package_icon_compared(self):
        a = Package(name="etcd", icon=Icon(data=b"a", media_type="image/png"))
        b = Package(name="etcd", icon=Icon(data=b"b", media_type="image/png"))
        assert a != b

    def test_different_kinds_not_equal(self):
        assert Package(name="x") != Channel(name="x")


class TestDeclarativeConfig:
    """Tests for DeclarativeConfig."""

    def test_add_routes_by_kind_in_order(self):
        cfg = DeclarativeConfig()
        cfg.add(Bundle(name="b1"))
        cfg.add(Package(name="p"))
        cfg.add(Bundle(name="b2"))
        cfg.add(Channel(name="c"))
        cfg.add(Meta(schema_="olm.deprecations", blob='{"schema":"olm.deprecations"}'))
        assert [b.name for b in cfg.bundles] == ["b1", "b2"]
        assert [p.name for p in cfg.packages] == ["p"]
        assert [c.name for c in cfg.channels] == ["c"]
        assert cfg.others[0].schema_ == "olm.deprecations"
        assert len(cfg) == 5

    def test_no_implicit_deduplication(self):
        cfg = DeclarativeConfig()
        cfg.add(Package(name="p"))
        cfg.add(Package(name="p"))
        assert len(cfg.packages) == 2

    def test_add_rejects_unknown_type(self):
        with pytest.raises(TypeError):
            DeclarativeConfig().add({"schema": "olm.package"})

    def test_config_model_dump_round_trip(self):
        cfg = DeclarativeConfig()
        cfg.add(Package(name="etcd", default_channel="alpha"))
        cfg.add(Meta.from_json('{"schema":"olm.deprecations","package":"etcd","extra":1}'))
        restored = DeclarativeConfig.model_validate(cfg.model_dump())
        assert restored.packages == cfg.packages
        assert restored.others[0].package == "etcd"
        assert restored.others[0].to_json() == '{"extra":1,"package":"etcd","schema":"olm.deprecations"}'


class TestWireNullsAndNames:
    """Tests for null values and python field names in wire input."""

    def test_null_list_decodes_as_empty(self):
        channel = Channel.model_validate(
            {"schema": "olm.channel", "name": "a", "package": "p", "entries": None},
            context={"wire": True},
        )
        assert channel.entries == []

    def test_null_string_decodes_as_empty(self):
        entry = ChannelEntry.model_validate({"name": "a", "replaces": None, "skips": None}, context={"wire": True})
        assert entry.replaces == ""
        assert entry.skips == []

    def test_null_optional_stays_none(self):
        pkg = Package.model_validate({"schema": "olm.package", "name": "p", "icon": None}, context={"wire": True})
        assert pkg.icon is None
        prop = Property.model_validate({"type": "olm.x", "value": None}, context={"wire": True})
        assert prop.value is None

    def test_python_names_are_not_wire_keys(self):
        pkg = Package.model_validate(
            {"schema": "olm.package", "name": "p", "default_channel": "alpha"},
            context={"wire": True},
        )
        assert pkg.default_channel == ""
        bundle = Bundle.model_validate(
            {"schema": "olm.bundle", "name": "b", "related_images": [{"name": "x", "image": "y"}]},
            context={"wire": True},
        )
        assert bundle.related_images == []
        entry = ChannelEntry.model_validate({"name": "a", "Skip_Range": "<1"}, context={"wire": True})
        assert entry.skip_range == ""

    def test_python_names_accepted_outside_wire(self):
        pkg = Package.model_validate({"name": "p", "default_channel": "alpha"})
        assert pkg.default_channel == "alpha"


class TestIconData:
    """Tests for icon base64 handling."""

    def test_line_wrapped_base64(self):
        icon = Icon.model_validate({"base64data": "PHN2\nZy8+", "mediatype": "image/svg+xml"})
        assert icon.data == b"<svg/>"
        icon = Icon.model_validate({"base64data": "PHN2\r\nZy8+\n"})
        assert icon.data == b"<svg/>"

    def test_invalid_base64_rejected(self):
        with pytest.raises(ValueError):
            Icon.model_validate({"base64data": "PHN2 Zy8+"})
