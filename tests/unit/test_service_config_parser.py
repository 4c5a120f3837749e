"""
Unit tests for the YAML service config parser.
"""
import textwrap

import pytest
from podquad.errors import InvalidInput
from podquad.PARSERS.service_config_parser import ServiceConfigParser
from podquad.UTILS.string_interpolation import EnvironmentInterpolator


def test_parse_from_string():
    content = textwrap.dedent("""
    name: nginxpm
    image: jc21/nginx-proxy-manager
    user-mode: 2
    network_mode: bridge
    ports:
      - "8080:80"
      - 443
    volumes:
      - ./data:/data
      - ./letsencrypt:/etc/letsencrypt
    environment:
      TZ: Europe/London
      DISABLE_IPV6: true
    auto_update: no
    health_check:
      command: curl -f http://localhost:81/ || exit 1
      retries: 5
    """)
    inputs = ServiceConfigParser(context={}).parse_from_string(content)
    assert inputs.name == 'nginxpm'
    assert inputs.user_mode == '2'
    assert inputs.network_mode == 'bridge'
    assert inputs.ports == ['8080:80', '443']
    assert inputs.volumes == ['./data:/data', './letsencrypt:/etc/letsencrypt']
    assert inputs.environment == ['TZ=Europe/London', 'DISABLE_IPV6=True']
    assert inputs.auto_update is False
    assert inputs.health_check.retries == 5


def test_parse_file(tmp_path):
    path = tmp_path / "grafana.yml"
    path.write_text("name: grafana\nimage: grafana/grafana\n")
    inputs = ServiceConfigParser(context={}).parse(str(path))
    assert inputs.image == 'grafana/grafana'
    assert inputs.pull_policy == '1'


def test_interpolation():
    content = "name: app\nimage: app\nenvironment: DB_PASS=${DB_PASS}, MODE=${MODE:-prod}\n"
    inputs = ServiceConfigParser(context={'DB_PASS': 's3cret'}).parse_from_string(content)
    assert inputs.environment == 'DB_PASS=s3cret, MODE=prod'


def test_unset_variable():
    with pytest.raises(InvalidInput):
        EnvironmentInterpolator.interpolate("${MISSING}", {})
    assert EnvironmentInterpolator.interpolate("${EMPTY}", {'EMPTY': ''}) == ''


def test_unknown_key():
    with pytest.raises(InvalidInput):
        ServiceConfigParser(context={}).parse_from_string("name: app\nimage: app\nreplicas: 3\n")


def test_unquoted_port_mapping():
    # 8080:80 unquoted is a YAML 1.1 base-60 integer
    with pytest.raises(InvalidInput):
        ServiceConfigParser(context={}).parse_from_string("name: app\nports:\n  - 8080:80\n")


def test_not_a_mapping():
    with pytest.raises(InvalidInput):
        ServiceConfigParser(context={}).parse_from_string("- name: app\n")


def test_numeric_health_interval():
    content = textwrap.dedent("""
    name: app
    image: app
    health_check:
      command: 'true'
      interval: 30
    """)
    inputs = ServiceConfigParser(context={}).parse_from_string(content)
    assert inputs.health_check.interval == 30
