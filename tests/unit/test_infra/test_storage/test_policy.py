"""Unit tests for the bucket policy model and Sid-keyed merge."""

import json

import pytest

from bucket_provisioner.infra.storage.policy import (
    POLICY_VERSION,
    PolicyDocument,
    PolicyStatement,
    build_access_statement,
    merge_statement,
)

ACTIONS = ["s3:GetObject", "s3:PutObject"]


def statement(sid: str, action: str = "s3:GetObject") -> PolicyStatement:
    return PolicyStatement(sid=sid, effect="Allow", action=[action], resource=["arn:aws:s3:::b1"])


class TestBuildAccessStatement:
    """Test the Allow statement built for a grant."""

    def test_statement_shape(self):
        stmt = build_access_statement("alice", "alice", "b1", ACTIONS)

        assert stmt.sid == "alice"
        assert stmt.effect == "Allow"
        assert stmt.principal == {"AWS": ["arn:aws:iam:::user/alice"]}
        assert stmt.resource == ["arn:aws:s3:::b1", "arn:aws:s3:::b1/*"]
        assert stmt.action == ACTIONS

    def test_subuser_statement_uses_parent_principal(self):
        stmt = build_access_statement("alice:bob", "alice", "b1", ACTIONS)

        assert stmt.sid == "alice:bob"
        assert stmt.principal == {"AWS": ["arn:aws:iam:::user/alice"]}


class TestMergeStatement:
    """Test merge semantics: replace in place by Sid, append otherwise."""

    def test_merge_into_absent_document(self):
        merged = merge_statement(None, statement("alice"))

        assert merged.version == POLICY_VERSION
        assert merged.statements == (statement("alice"),)

    def test_merge_into_empty_document(self):
        merged = merge_statement(PolicyDocument(), statement("alice"))

        assert merged.sids == ["alice"]

    def test_append_new_sid(self):
        doc = PolicyDocument(statements=(statement("alice"),))

        merged = merge_statement(doc, statement("carol"))

        assert merged.sids == ["alice", "carol"]

    def test_replace_keeps_position(self):
        doc = PolicyDocument(statements=(statement("a"), statement("b"), statement("c")))
        replacement = statement("b", action="s3:DeleteObject")

        merged = merge_statement(doc, replacement)

        assert merged.sids == ["a", "b", "c"]
        assert merged.statements[1] == replacement

    def test_replace_by_sid_leaves_single_statement(self):
        s1 = statement("alice", action="s3:GetObject")
        s2 = statement("alice", action="s3:PutObject")

        merged = merge_statement(merge_statement(None, s1), s2)

        assert merged.sids == ["alice"]
        assert merged.find("alice") == s2

    def test_duplicate_sids_collapse_to_one(self):
        doc = PolicyDocument(
            statements=(
                statement("alice"),
                statement("x"),
                statement("alice", action="s3:PutObject"),
            )
        )
        replacement = statement("alice", action="s3:DeleteObject")

        merged = merge_statement(doc, replacement)

        assert merged.sids == ["alice", "x"]
        assert merged.statements[0] == replacement

    @pytest.mark.parametrize(
        "document",
        [
            None,
            PolicyDocument(),
            PolicyDocument(statements=(statement("alice"),)),
            PolicyDocument(statements=(statement("x"), statement("alice", action="s3:PutObject"))),
        ],
    )
    def test_merge_is_idempotent(self, document):
        s = statement("alice")

        once = merge_statement(document, s)
        twice = merge_statement(once, s)

        assert twice == once

    def test_merge_does_not_modify_input(self):
        doc = PolicyDocument(statements=(statement("alice"),))

        merge_statement(doc, statement("carol"))

        assert doc.sids == ["alice"]

    def test_statements_without_sid_are_kept(self):
        anonymous = PolicyStatement(effect="Deny", action="s3:*", resource="*")
        doc = PolicyDocument(statements=(anonymous,))

        merged = merge_statement(doc, statement("alice"))

        assert merged.statements == (anonymous, statement("alice"))


class TestPolicyDocumentJson:
    """Test parsing and serializing policies as the backend stores them."""

    def test_parse_single_statement_object(self):
        raw = json.dumps(
            {
                "Version": "2012-10-17",
                "Statement": {"Sid": "alice", "Effect": "Allow", "Action": "s3:GetObject"},
            }
        )

        doc = PolicyDocument.from_json(raw)

        assert doc.sids == ["alice"]
        assert doc.statements[0].action == "s3:GetObject"

    def test_unknown_fields_survive_round_trip(self):
        raw = json.dumps(
            {
                "Version": "2012-10-17",
                "Id": "policy-1",
                "Statement": [
                    {"Sid": "ops", "Effect": "Allow", "NotPrincipal": {"AWS": "x"}, "Action": "s3:*"}
                ],
            }
        )

        out = json.loads(PolicyDocument.from_json(raw).to_json())

        assert out["Id"] == "policy-1"
        assert out["Statement"][0]["NotPrincipal"] == {"AWS": "x"}

    def test_to_json_uses_aws_field_names(self):
        doc = merge_statement(None, build_access_statement("alice", "alice", "b1", ACTIONS))

        out = json.loads(doc.to_json())

        assert out["Version"] == POLICY_VERSION
        assert out["Statement"][0]["Sid"] == "alice"
        assert out["Statement"][0]["Principal"] == {"AWS": ["arn:aws:iam:::user/alice"]}
        assert "Condition" not in out["Statement"][0]
