import pytest

from pizza_order_client.abstractions.dto.tools import ToolDescriptor
from pizza_order_client.domain.errors import ToolAdaptationError, ToolExecutionError
from pizza_order_client.infrastructure.tools.invocation_adapter import ToolInvocationAdapter
from pizza_order_client.infrastructure.tools.mcp_function import adapt, adapt_all, sanitize_function_name
from pizza_order_client.infrastructure.tools.tool_namespace import ToolNamespace

from conftest import PIZZA_LIST


def test_adapt_keeps_name_description_and_schema(fake_provider, pizza_descriptors):
    function = adapt(pizza_descriptors[1], fake_provider)

    assert function.name == "place_order"
    assert function.remote_name == "place_order"
    assert function.description == "Place a pizza order"
    assert function.input_schema["required"] == ["userId", "items"]


def test_adapt_defaults_missing_schema_to_empty_object(fake_provider):
    function = adapt(ToolDescriptor(name="get_pizzas", description="list pizzas", raw_schema={}), fake_provider)
    assert function.input_schema == {"type": "object", "properties": {}}


def test_adapt_sanitizes_names_but_calls_remote_name(fake_provider):
    fake_provider.results["get-toppings.v2"] = ["cheese"]
    function = adapt(ToolDescriptor(name="get-toppings.v2", description="", raw_schema={}), fake_provider)

    assert function.name == "get_toppings_v2"
    assert function.run({}) == ["cheese"]
    assert fake_provider.calls[-1] == ("get-toppings.v2", {})


@pytest.mark.parametrize("descriptor", [
    ToolDescriptor(name="", description="no name", raw_schema={}),
    ToolDescriptor(name="---", description="nothing usable", raw_schema={}),
    ToolDescriptor(name="bad_schema", description="", raw_schema="not a schema"),
    ToolDescriptor(name="array_schema", description="", raw_schema={"type": "array"}),
    ToolDescriptor(name="bad_props", description="", raw_schema={"type": "object", "properties": []}),
])
def test_adapt_rejects_malformed_descriptors(fake_provider, descriptor):
    with pytest.raises(ToolAdaptationError):
        adapt(descriptor, fake_provider)


def test_one_malformed_descriptor_does_not_fail_the_batch(fake_provider, pizza_descriptors):
    descriptors = [
        pizza_descriptors[0],
        ToolDescriptor(name="broken", description="", raw_schema={"type": "string"}),
        pizza_descriptors[1],
        ToolDescriptor(name="get_toppings", description="list toppings", raw_schema={"type": "object"}),
    ]
    namespace = ToolNamespace("PizzaTools")

    report = adapt_all(descriptors, fake_provider, namespace)

    assert len(report.functions) == len(descriptors) - 1
    assert len(report.errors) == 1
    assert report.errors[0].tool_name == "broken"
    assert [f.name for f in namespace] == ["get_pizzas", "place_order", "get_toppings"]


def test_duplicate_names_are_recorded_not_fatal(fake_provider):
    descriptors = [
        ToolDescriptor(name="get_pizzas", description="first", raw_schema={}),
        ToolDescriptor(name="get-pizzas", description="sanitizes to the same name", raw_schema={}),
    ]
    namespace = ToolNamespace("PizzaTools")

    report = adapt_all(descriptors, fake_provider, namespace)

    assert [f.description for f in report.functions] == ["first"]
    assert report.errors[0].tool_name == "get_pizzas"
    assert len(namespace) == 1


def test_direct_invocation_returns_provider_result_unmodified(provider_cls):
    provider = provider_cls(
        descriptors=[ToolDescriptor(name="get_pizzas", description="list pizzas", raw_schema={})],
        results={"get_pizzas": PIZZA_LIST},
    )
    namespace = ToolNamespace("PizzaTools")
    report = adapt_all(provider.list_tools(), provider, namespace)

    assert [f.name for f in report.functions] == ["get_pizzas"]

    result = ToolInvocationAdapter(namespace).execute("get_pizzas")

    assert result.ok
    assert result.value is PIZZA_LIST
    assert result.tool_name == "PizzaTools_get_pizzas"
    assert provider.calls == [("get_pizzas", {})]


def test_direct_invocation_reports_errors_with_inner_cause(provider_cls):
    failure = ToolExecutionError("get_pizzas", "kitchen closed")
    try:
        raise failure from TimeoutError("oven timeout")
    except ToolExecutionError:
        pass
    provider = provider_cls(
        descriptors=[ToolDescriptor(name="get_pizzas", description="", raw_schema={})],
        results={"get_pizzas": failure},
    )
    namespace = ToolNamespace("PizzaTools")
    adapt_all(provider.list_tools(), provider, namespace)

    result = ToolInvocationAdapter(namespace).execute("get_pizzas")

    assert not result.ok
    assert "kitchen closed" in result.error
    assert result.inner_error == "oven timeout"


def test_direct_invocation_of_unknown_tool(namespace):
    result = ToolInvocationAdapter(namespace).execute("bake_cake")
    assert not result.ok
    assert "bake_cake" in result.error


def test_sanitize_function_name():
    assert sanitize_function_name(" get pizzas ") == "get_pizzas"
    assert sanitize_function_name("orders/track") == "orders_track"
