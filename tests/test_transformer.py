import textwrap

from jsxlocalizer.core.locale_store import LocaleTableStore
from jsxlocalizer.core.transformer import LocalizationTransformer, TransformStatus, transform_source
from jsxlocalizer.utils.config import ExtractionSettings


def _src(code: str) -> str:
    return textwrap.dedent(code).lstrip()


GREETING = _src("""
    import React from 'react';

    export default function Greeting() {
      return <h1>Hello, World!</h1>;
    }
""")


def test_simple_text_is_rewritten(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    result = LocalizationTransformer(store=store).process(GREETING, "Greeting.jsx")

    assert result.status is TransformStatus.TRANSFORMED
    assert result.source == _src("""
        import { useTranslation } from 'react-i18next';
        import React from 'react';

        export default function Greeting() {
          const { t } = useTranslation();
          return <h1>{t('helloWorld')}</h1>;
        }
    """)
    assert store.pending() == [("helloWorld", "Hello, World!")]
    assert result.components == ["Greeting"]


def test_mixed_children_become_one_call(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = _src("""
        function Welcome({ name }) {
          return <p>Welcome, {name} !</p>;
        }
    """)
    output = transform_source(source, "Welcome.jsx", store)

    assert "<p>{t('welcomeName', { name: name })}</p>" in output
    assert store.pending() == [("welcomeName", "Welcome, {{name}} !")]


def test_mixed_children_keep_other_expressions(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = _src("""
        function Cart({ count, items }) {
          return <p>You have {count} items {items.length > 0 && <b>!</b>}</p>;
        }
    """)
    output = transform_source(source, "Cart.jsx", store)

    assert "{t('youHaveCountItems', { count: count })} {items.length > 0 && <b>!</b>}" in output
    assert store.pending() == [("youHaveCountItems", "You have {{count}} items")]


def test_nested_element_splits_mixed_text(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = _src("""
        function Help({ name }) {
          return <p>Hello, {name}! See <b>docs</b> now {name}</p>;
        }
    """)
    output = transform_source(source, "Help.jsx", store)

    assert (
        "<p>{t('helloNameSee', { name: name })} <b>{t('docs')}</b> "
        "{t('nowName', { name: name })}</p>"
    ) in output
    assert dict(store.pending()) == {
        "docs": "docs",
        "helloNameSee": "Hello, {{name}} ! See",
        "nowName": "now {{name}}",
    }


def test_placeholder_and_interpolation_are_skipped(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = _src("""
        function Status({ error, value, label }) {
          return (
            <div>
              <span>{value}</span>
              <span>{value} {label}</span>
              <em>&#123;error&#125;</em>
            </div>
          );
        }
    """)
    output = transform_source(source, "Status.jsx", store)

    assert "<span>{value}</span>" in output
    assert "<span>{value} {label}</span>" in output
    assert "<em>&#123;error&#125;</em>" in output
    assert len(store) == 0


def test_second_run_is_a_no_op(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = _src("""
        export const Banner = ({ user }) => (
          <section>
            <h2>Sale today</h2>
            <p>Hi {user}, enjoy</p>
          </section>
        );
    """)
    transformer = LocalizationTransformer(store=store)
    first = transformer.process(source, "Banner.jsx")
    assert first.status is TransformStatus.TRANSFORMED
    assert dict(store.pending()) == {"saleToday": "Sale today", "hiUserEnjoy": "Hi {{user}} , enjoy"}

    second_store = LocaleTableStore(locales_dir=str(tmp_path))
    second = LocalizationTransformer(store=second_store).process(first.source, "Banner.jsx")
    assert second.status is TransformStatus.UNCHANGED
    assert second.source == first.source
    assert len(second_store) == 0


def test_implicit_return_arrow_gets_hook(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    output = transform_source("const Badge = () => <span>New</span>;\n", "Badge.jsx", store)
    assert output == (
        "import { useTranslation } from 'react-i18next';\n"
        "const Badge = () => {\n"
        "  const { t } = useTranslation();\n"
        "  return <span>{t('new')}</span>;\n"
        "};\n"
    )


def test_non_component_file_is_untouched(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = "export const add = (a, b) => a + b;\n"
    result = LocalizationTransformer(store=store).process(source, "math.js")
    assert result.status is TransformStatus.SKIPPED
    assert result.source == source
    assert len(store) == 0


def test_parse_error_returns_original(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = "function Broken() {\n  return <div>Unclosed;\n}\n"
    result = LocalizationTransformer(store=store).process(source, "Broken.jsx")
    assert result.status is TransformStatus.FAILED
    assert result.source == source
    assert result.error
    assert len(store) == 0


def test_unexpected_failure_leaves_store_untouched(tmp_path, monkeypatch):
    from jsxlocalizer.core.extractor import TextExtractor

    def boom(self, unit):
        raise RuntimeError("boom")

    monkeypatch.setattr(TextExtractor, "extract_mixed_children", boom)
    store = LocaleTableStore(locales_dir=str(tmp_path))
    assert transform_source(GREETING, "Greeting.jsx", store) == GREETING
    assert len(store) == 0


def test_component_key_policy(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    settings = ExtractionSettings(key_policy="component")
    output = transform_source(GREETING, "Greeting.jsx", store, settings)
    assert "{t('Greeting_hello_world')}" in output
    assert store.pending() == [("Greeting_hello_world", "Hello, World!")]


def test_typescript_component(tmp_path):
    store = LocaleTableStore(locales_dir=str(tmp_path))
    source = _src("""
        type Props = { title: string };

        export function Card({ title }: Props) {
          return <section aria-label={title}>Card body</section>;
        }
    """)
    output = transform_source(source, "Card.tsx", store)
    assert "<section aria-label={title}>{t('cardBody')}</section>" in output
    assert store.pending() == [("cardBody", "Card body")]
