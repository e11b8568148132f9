from katana.utils.formfields import Form, parse_form_fields

HTML_FORM_EXAMPLE = """<html>
<head>
	<title>HTML Form Test</title>
</head>
<body>
	<form method="POST" action="/test">
		<input type="text" name="firstname"><br>
		<textarea name=textarea1></textarea>
		<select name=select1></select>
		<input type=text />
	</form>
	<form method=post action=https://abs.example.com></form>
	<form action=//prel.example.com></form>
	<form action=\\\\unc.example.com></form>
	<form action=/root_rel></form>
	<form action=rel_path></form>
	<form></form>
</body>
</html>"""


def test_parse_form_fields_from_source():
    forms = parse_form_fields(HTML_FORM_EXAMPLE, "https://example.com/path")

    assert len(forms) == 7
    assert forms[0].action == "https://example.com/test"
    assert forms[0].method == "POST"
    assert forms[1].method == "POST"
    assert forms[1].action == "https://abs.example.com"
    assert forms[2].method == "GET"
    assert forms[2].action == "//prel.example.com"
    assert forms[3].method == "GET"
    assert forms[3].action == "\\\\unc.example.com"
    assert forms[4].method == "GET"
    assert forms[4].action == "https://example.com/root_rel"
    assert forms[5].method == "GET"
    assert forms[5].action == "https://example.com/path/rel_path"
    assert forms[6].method == "GET"
    assert forms[6].action == "https://example.com/path"
    assert "firstname" in forms[0].parameters
    assert "textarea1" in forms[0].parameters
    assert "select1" in forms[0].parameters
    assert len(forms[0].parameters) == 3


def test_enctype_defaults():
    forms = parse_form_fields(HTML_FORM_EXAMPLE, "https://example.com/path")
    assert forms[0].enctype == "application/x-www-form-urlencoded"
    assert forms[1].enctype == "application/x-www-form-urlencoded"
    assert forms[2].enctype == ""


def test_explicit_enctype_kept():
    html = '<form method="post" enctype="multipart/form-data" action="up"><input name="f"></form>'
    forms = parse_form_fields(html, "https://example.com/")
    assert forms == [
        Form(
            method="POST",
            action="https://example.com/up",
            enctype="multipart/form-data",
            parameters=["f"],
        )
    ]


def test_relative_action_kept_without_base():
    forms = parse_form_fields('<form action="rel"></form>')
    assert forms == [Form(method="GET", action="rel", enctype="", parameters=[])]


def test_relative_action_merges_query():
    forms = parse_form_fields('<form action="go?b=2"></form>', "https://example.com/dir?a=1")
    assert forms[0].action == "https://example.com/dir/go?a=1&b=2"


def test_parameters_keep_document_order():
    html = '<form><select name="s"></select><input name="i"><textarea name="t"></textarea></form>'
    forms = parse_form_fields(html, "https://example.com/")
    assert forms[0].parameters == ["s", "i", "t"]