from conftest import FALLBACK, SESSION, build_request

from nlu_bridge.services.webhook_agent import WebhookAgent, short_context_name


class TestShortContextName:
    def test_strips_session_prefix(self):
        assert short_context_name(f"{SESSION}/contexts/UnknownUtterance") == "unknownutterance"

    def test_plain_name(self):
        assert short_context_name("unknownutterance") == "unknownutterance"


class TestWebhookAgent:
    def test_exposes_request_fields(self):
        agent = WebhookAgent(build_request(FALLBACK, query="reset my password", payload={"user": "jane"}))

        assert agent.intent == FALLBACK
        assert agent.query == "reset my password"
        assert agent.session == SESSION
        assert agent.locale == "en"
        assert agent.payload == {"user": "jane"}

    def test_reads_input_context(self):
        agent = WebhookAgent(build_request(FALLBACK, retries_left=1))

        context = agent.context.get("unknownutterance")

        assert context is not None
        assert context.parameters["retriesLeft"] == 1

    def test_missing_context_is_none(self):
        agent = WebhookAgent(build_request(FALLBACK))
        assert agent.context.get("unknownutterance") is None

    def test_set_context_is_read_back_and_written_out(self):
        agent = WebhookAgent(build_request(FALLBACK, retries_left=1))

        agent.context.set("unknownutterance", 50, {"retriesLeft": 0})

        assert agent.context.get("unknownutterance").parameters == {"retriesLeft": 0}
        response = agent.build_response()
        assert len(response.outputContexts) == 1
        assert response.outputContexts[0].name == f"{SESSION}/contexts/unknownutterance"
        assert response.outputContexts[0].lifespanCount == 50

    def test_input_contexts_are_not_echoed(self):
        agent = WebhookAgent(build_request(FALLBACK, retries_left=1))
        agent.add("hi")

        assert agent.build_response().outputContexts is None

    def test_messages_become_fulfillment_messages(self):
        agent = WebhookAgent(build_request(FALLBACK))
        agent.add("first")
        agent.add("second")

        response = agent.build_response()

        assert response.fulfillmentText == "first"
        assert [m.text.text for m in response.fulfillmentMessages] == [["first"], ["second"]]

    def test_followup_event_uses_request_locale(self):
        agent = WebhookAgent(build_request(FALLBACK))
        agent.set_followup_event("TalkToAgent")

        event = agent.build_response().followupEventInput

        assert event.name == "TalkToAgent"
        assert event.languageCode == "en"

    def test_empty_agent_builds_empty_response(self):
        response = WebhookAgent(build_request(FALLBACK)).build_response()
        assert response.model_dump(exclude_none=True) == {}
