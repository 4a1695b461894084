"""Tests for activation conditions over root packages and root features."""

from unittest.mock import patch

import pytest

from conditions.engine import ConditionEngine, all_features
from conditions.service import plan_document
from constants import Constants
from errors import GraphLoadError, PrefetchError
from graph.models import DepKind

A = "a 0.1.0"
B = "b 1.0.0"
LOG = "log 0.4.14"
X = "x 0.1.0"
Y = "y 0.1.0"
Z = "z 1.0.0"
M = "m 1.0.0"
TESTER = "tester 1.0.0"


def var_has(entry):
    return f'{Constants.ROOT_FEATURES_VAR} ? "{entry}"'


@pytest.fixture
def single_root(raw_package):
    """Root a: unconditional log, optional b behind "b" and "full" = ["b"]."""
    return {
        A: raw_package(
            {
                "dependencies": {"log": "0.4", "b": {"optional": True}},
                "features": {"full": ["b"]},
            },
            deps={"log": LOG, "b": B},
        ),
        B: raw_package({"features": {"default": []}}),
        LOG: raw_package({"features": {"default": ["std"], "std": []}}),
    }


@pytest.fixture
def two_roots(raw_package):
    """Roots x and y both need log; x also has an optional z and a dev-only tester."""
    return {
        X: raw_package(
            {
                "dependencies": {"log": "0.4", "z": {"optional": True}},
                "dev-dependencies": {"tester": "1"},
            },
            deps={"log": LOG, "z": Z, "tester": TESTER},
        ),
        Y: raw_package({"dependencies": {"log": "0.4"}}, deps={"log": LOG}),
        LOG: raw_package({"features": {"default": ["std"], "std": []}}),
        Z: raw_package(),
        TESTER: raw_package(),
    }


class TestAllFeatures:
    def test_declared_optional_and_implicit_default(self, make_packages, single_root):
        packages = make_packages(single_root)
        assert all_features(packages[A]) == ["full", "b", "default"]
        assert all_features(packages[B]) == ["default"]


class TestEndToEnd:
    """Optional dependency b behind feature "b" with "full" = ["b"]."""

    def test_optional_dependency_condition(self, make_packages, single_root):
        engine = ConditionEngine(make_packages(single_root), [A])
        assert engine.dependency_condition(A, B) == f'{var_has("a/b")} || {var_has("a/full")}'

    def test_root_features(self, make_packages, single_root):
        engine = ConditionEngine(make_packages(single_root), [A])
        assert engine.feature_condition(A, "full") == var_has("a/full")
        assert engine.feature_condition(A, "b") == f'{var_has("a/b")} || {var_has("a/full")}'
        assert engine.feature_condition(A, "default") == var_has("a/default")

    def test_unconditional_items_are_required(self, make_packages, single_root):
        engine = ConditionEngine(make_packages(single_root), [A])
        assert engine.dependency_condition(A, LOG) == "true"
        assert engine.feature_condition(LOG, "std") == "true"

    def test_single_item_package_collapses(self, make_packages, single_root):
        engine = ConditionEngine(make_packages(single_root), [A])
        assert engine.feature_condition(B, "default") == "true"

    def test_custom_variable(self, make_packages, single_root):
        engine = ConditionEngine(make_packages(single_root), [A], root_features_var="enabled")
        assert engine.feature_condition(A, "full") == 'enabled ? "a/full"'

    def test_run_is_idempotent(self, make_packages, single_root):
        engine = ConditionEngine(make_packages(single_root), [A])
        first = engine.plan()
        assert engine.plan() == first


class TestSimplification:
    """Coverage promotion, dev edges and uniform collapse."""

    def test_coverage_promotion(self, make_packages, two_roots):
        engine = ConditionEngine(make_packages(two_roots), [X, Y])
        # log's features are pulled in by both roots unconditionally.
        assert engine.feature_condition(LOG, "std") == "true"
        assert engine.feature_condition(LOG, "default") == "true"

    def test_partial_requirement_stays_conditional(self, make_packages, two_roots):
        engine = ConditionEngine(make_packages(two_roots), [X, Y])
        assert engine.dependency_condition(X, LOG) == var_has("x")
        assert engine.dependency_condition(X, Z) == var_has("x/z")

    def test_duplicate_roots_count_once(self, make_packages, two_roots):
        engine = ConditionEngine(make_packages(two_roots), [X, X])
        assert engine.roots == [X]
        assert engine.dependency_condition(X, LOG) == "true"
        assert engine.feature_condition(LOG, "std") == "true"

    def test_dev_edges_are_required(self, make_packages, two_roots):
        engine = ConditionEngine(make_packages(two_roots), [X, Y])
        assert engine.dependency_condition(X, TESTER, DepKind.DEV) == "true"

    def test_uniform_package_collapses(self, make_packages, raw_package):
        packages = make_packages({
            "r 0.1.0": raw_package(
                {"dependencies": {"m": {"optional": True, "features": ["fast", "small"]}}},
                deps={"m": M},
            ),
            M: raw_package({"features": {"fast": [], "small": []}}),
        })
        engine = ConditionEngine(packages, ["r 0.1.0"])
        assert engine.dependency_condition("r 0.1.0", M) == var_has("r/m")
        for feature in ("default", "fast", "small"):
            assert engine.feature_condition(M, feature) == "true"

    def test_required_items_never_revert(self, make_packages, two_roots):
        engine = ConditionEngine(make_packages(two_roots), [X, Y])
        engine.run()
        required = [
            item
            for rpkg in engine.rpkgs.values()
            for item in list(rpkg.features.values()) + [d.optionality for d in rpkg.deps.values()]
            if item.is_required
        ]
        engine.simplify(2)
        assert all(item.is_required for item in required)


class TestPlan:
    """JSON-ready plan output."""

    def test_plan_shape(self, make_packages, single_root):
        plan = ConditionEngine(make_packages(single_root), [A]).plan()
        assert plan[Constants.VERSION_ATTRIBUTE_NAME] == Constants.VERSION
        assert plan["roots"] == ["a"]
        assert plan["rootFeaturesVar"] == Constants.ROOT_FEATURES_VAR
        assert list(plan["packages"]) == [A, B, LOG]
        deps = plan["packages"][A]["dependencies"]
        assert [(d["packageId"], d["kind"], d["name"]) for d in deps] == [(B, "normal", "b"), (LOG, "normal", "log")]
        assert deps[1]["condition"] == "true"
        assert deps[1]["platforms"] is None

    def test_platform_keys_are_reported(self, make_packages, raw_package):
        packages = make_packages({
            A: raw_package(
                {"target": {"cfg(unix)": {"dependencies": {"log": "0.4"}}}},
                deps={"log": LOG},
            ),
            LOG: raw_package(),
        })
        plan = ConditionEngine(packages, [A]).plan()
        assert plan["packages"][A]["dependencies"][0]["platforms"] == ["cfg(unix)"]

    def test_unknown_root(self, make_packages, single_root):
        with pytest.raises(GraphLoadError):
            ConditionEngine(make_packages(single_root), ["nope 1.0.0"])

    def test_prefetch_fills_git_checksums(self, make_packages, single_root):
        single_root[B]["source"] = {"git": "https://example.com/b.git", "rev": "abc123"}
        single_root[LOG]["checksum"] = "known"
        engine = ConditionEngine(make_packages(single_root), [A])
        with patch("conditions.engine.prefetch_git", return_value="sha") as mock_prefetch:
            plan = engine.plan(prefetch=True)
        mock_prefetch.assert_called_once_with("https://example.com/b.git", "abc123")
        assert plan["packages"][B]["checksum"] == "sha"
        assert plan["packages"][LOG]["checksum"] == "known"
        assert plan["packages"][A]["checksum"] is None

    def test_prefetch_off_by_default(self, make_packages, single_root):
        single_root[B]["source"] = {"git": "https://example.com/b.git", "rev": "abc123"}
        with patch("conditions.engine.prefetch_git") as mock_prefetch:
            plan = ConditionEngine(make_packages(single_root), [A]).plan()
        mock_prefetch.assert_not_called()
        assert plan["packages"][B]["checksum"] is None

    def test_git_source_without_rev(self, make_packages, single_root):
        single_root[B]["source"] = {"git": "https://example.com/b.git"}
        with pytest.raises(PrefetchError):
            ConditionEngine(make_packages(single_root), [A]).plan(prefetch=True)

    def test_plan_document(self, single_root):
        plan = plan_document(
            {"roots": [A], "packages": single_root},
            root_features_var="on",
            host_platform="x86_64-unknown-linux-gnu",
        )
        assert plan["rootFeaturesVar"] == "on"
        assert plan["packages"][A]["features"]["full"] == 'on ? "a/full"'
