"""Parsing of Fedora 3 REST API XML payloads."""

from __future__ import annotations

from typing import Any

from lxml import etree

from repoclient.core.exceptions import RepositoryXmlError
from repoclient.transport.response import HttpResponse

__all__ = ["FedoraApiSerializer", "make_xml_parser"]


def make_xml_parser(
    *,
    recover: bool = False,
    remove_blank_text: bool = True,
    resolve_entities: bool = False,
    load_dtd: bool = False,
    no_network: bool = True,
    huge_tree: bool = False,
) -> etree.XMLParser:
    """Create an XML parser that never touches the network or expands entities."""
    return etree.XMLParser(
        recover=recover,
        ns_clean=True,
        remove_blank_text=remove_blank_text,
        resolve_entities=resolve_entities,
        load_dtd=load_dtd,
        no_network=no_network,
        huge_tree=huge_tree,
    )


def _localname(element: etree._Element) -> str:
    return etree.QName(element).localname


def _element_to_value(element: etree._Element) -> Any:
    children = [child for child in element if isinstance(child.tag, str)]
    if not children:
        return (element.text or "").strip()
    result: dict[str, Any] = {}
    for child in children:
        name = _localname(child)
        value = _element_to_value(child)
        if name in result:
            existing = result[name]
            if not isinstance(existing, list):
                result[name] = existing = [existing]
            existing.append(value)
        else:
            result[name] = value
    return result


def _as_list(value: Any) -> list[Any]:
    if value in (None, ""):
        return []
    return value if isinstance(value, list) else [value]


class FedoraApiSerializer:
    """Turn API responses into plain Python structures."""

    def __init__(self) -> None:
        self._parser = make_xml_parser()

    def load(self, response: HttpResponse) -> etree._Element:
        """Parse the body of ``response``."""
        if not response.content:
            raise RepositoryXmlError(
                "Empty XML payload",
                component="fedora3.serializer",
                details={"url": response.url},
            )
        try:
            root = etree.fromstring(response.content, parser=self._parser)
        except etree.XMLSyntaxError as exc:
            raise RepositoryXmlError(
                f"Malformed XML payload: {exc}",
                component="fedora3.serializer",
                details={"url": response.url},
                cause=exc,
            ) from exc
        if root is None:
            raise RepositoryXmlError("Malformed XML payload", component="fedora3.serializer")
        return root

    def _expect(self, root: etree._Element, name: str) -> etree._Element:
        if _localname(root) != name:
            raise RepositoryXmlError(
                f"Expected <{name}> but got <{_localname(root)}>",
                component="fedora3.serializer",
            )
        return root

    def describe_repository(self, response: HttpResponse) -> dict[str, Any]:
        root = self._expect(self.load(response), "fedoraRepository")
        info = _element_to_value(root)
        if not isinstance(info, dict):
            return {}
        if "adminEmail" in info:
            info["adminEmail"] = _as_list(info["adminEmail"])
        return info

    def get_next_pid(self, response: HttpResponse) -> list[str]:
        root = self._expect(self.load(response), "pidList")
        return [(pid.text or "").strip() for pid in root if isinstance(pid.tag, str) and _localname(pid) == "pid"]

    def get_object_profile(self, response: HttpResponse) -> dict[str, Any]:
        root = self._expect(self.load(response), "objectProfile")
        profile = _element_to_value(root)
        if not isinstance(profile, dict):
            profile = {}
        models = profile.get("objModels")
        profile["objModels"] = _as_list(models.get("model")) if isinstance(models, dict) else []
        if "pid" in root.attrib:
            profile["pid"] = root.attrib["pid"]
        return profile

    def list_datastreams(self, response: HttpResponse) -> dict[str, dict[str, str]]:
        root = self._expect(self.load(response), "objectDatastreams")
        datastreams: dict[str, dict[str, str]] = {}
        for element in root:
            if not isinstance(element.tag, str) or _localname(element) != "datastream":
                continue
            datastreams[element.get("dsid", "")] = {
                "label": element.get("label", ""),
                "mimetype": element.get("mimeType", ""),
            }
        return datastreams

    def get_datastream_profile(self, response: HttpResponse) -> dict[str, Any]:
        root = self._expect(self.load(response), "datastreamProfile")
        profile = _element_to_value(root)
        if not isinstance(profile, dict):
            profile = {}
        profile.setdefault("dsID", root.get("dsID", ""))
        return profile
